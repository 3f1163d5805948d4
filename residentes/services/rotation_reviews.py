"""
Reviews of external rotations.

A resident reviews the centre that hosted one of their own rotations,
answering a questionnaire of its own.  Moderation works as for hospital
reviews: only approved reviews are listed publicly, authors always see
theirs, and every edit resets the approval.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from residentes.context import ActorContext
from residentes.exceptions import ConflictError, NotFoundError
from residentes.models import ExternalRotation, RotationReview, RotationReviewAnswer, RotationReviewQuestion
from residentes.services.audit import log_action
from residentes.services.reviews import check_required, clean_text, format_question, validated_answers

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = 'Ya has escrito una reseña para esta rotación'


def list_questions() -> list[dict]:
    qs = RotationReviewQuestion.objects.filter(is_active=True).order_by('position', 'id')
    return [format_question(q) for q in qs]


def format_rotation_review(review: RotationReview, *, with_answers: bool=True) -> dict:
    data = {
        'id': review.id,
        'user_id': None if review.is_anonymous else review.user_id,
        'rotation_id': review.rotation_id,
        'external_hospital_name': review.external_hospital_name,
        'city': review.city,
        'country': review.country,
        'start_date': review.start_date.isoformat(),
        'end_date': review.end_date.isoformat() if review.end_date else None,
        'free_comment': review.free_comment,
        'is_anonymous': review.is_anonymous,
        'is_approved': review.is_approved,
        'approved_at': review.approved_at.isoformat() if review.approved_at else None,
        'created_at': review.created_at.isoformat() if review.created_at else None,
        'updated_at': review.updated_at.isoformat() if review.updated_at else None,
    }
    if not review.is_anonymous:
        data['user'] = {
            'id': review.user.id,
            'name': review.user.first_name,
            'surname': review.user.last_name,
            'speciality_id': review.user.specialty_id,
        }
    if with_answers:
        data['answers'] = [
            {
                'question_id': a.question_id,
                'question_text': a.question.text,
                'question_type': a.question.type,
                'rating_value': a.rating_value,
                'text_value': a.text_value,
            }
            for a in review.answers.select_related('question').order_by('question__position', 'question_id')
        ]
    return data


def _answer_rows(review: RotationReview, answers: Iterable[dict]) -> list[RotationReviewAnswer]:
    return [
        RotationReviewAnswer(review=review, question=question, rating_value=rating, text_value=text)
        for question, rating, text in validated_answers(answers, RotationReviewQuestion)
    ]


def _own_review(ctx: ActorContext, review_id) -> RotationReview:
    review = RotationReview.objects.select_related('user').filter(id=review_id, user=ctx.user).first()
    if not review:
        raise NotFoundError('Reseña no encontrada')
    return review


def _clean_place(value: Optional[str]) -> str:
    return clean_text(value) or ''


def get_my_rotation_review(ctx: ActorContext, rotation_id) -> Optional[dict]:
    """The caller's review of one of their rotations, or ``None``."""
    review = RotationReview.objects.select_related('user').filter(user=ctx.user, rotation_id=rotation_id).first()
    return format_rotation_review(review) if review else None


def create_rotation_review(ctx: ActorContext, rotation_id, external_hospital_name: str, answers,
                           city: Optional[str]=None, country: Optional[str]=None,
                           free_comment: Optional[str]=None, is_anonymous: bool=False) -> dict:
    """Review one of the caller's rotations; its dates are copied onto the review."""
    rotation = ExternalRotation.objects.filter(id=rotation_id, user=ctx.user).first()
    if not rotation:
        raise NotFoundError('Rotación no encontrada')
    name = _clean_place(external_hospital_name)
    if not name:
        raise ValidationError({'externalHospitalName': 'Indica el centro de la rotación'})
    check_required(answers, RotationReviewQuestion)
    if RotationReview.objects.filter(user=ctx.user, rotation=rotation).exists():
        raise ConflictError(ALREADY_REVIEWED)
    try:
        with transaction.atomic():
            review = RotationReview.objects.create(
                user=ctx.user,
                rotation=rotation,
                external_hospital_name=name,
                city=_clean_place(city) or rotation.city,
                country=_clean_place(country) or rotation.country,
                start_date=rotation.start_date,
                end_date=rotation.end_date,
                free_comment=clean_text(free_comment),
                is_anonymous=bool(is_anonymous),
                is_approved=False,
            )
            RotationReviewAnswer.objects.bulk_create(_answer_rows(review, answers))
    except IntegrityError:
        logger.info('concurrent rotation review by user %s for rotation %s', ctx.user_id, rotation.id)
        raise ConflictError(ALREADY_REVIEWED)
    log_action(user=ctx.user, action='rotation_review_create', object_type='rotation_review', object_id=review.id)
    return format_rotation_review(review)


def update_rotation_review(ctx: ActorContext, review_id, answers, external_hospital_name: Optional[str]=None,
                           city: Optional[str]=None, country: Optional[str]=None,
                           free_comment: Optional[str]=None, is_anonymous: bool=False) -> dict:
    """Replace the answers and details of an own review; it goes back to moderation."""
    review = _own_review(ctx, review_id)
    check_required(answers, RotationReviewQuestion)
    with transaction.atomic():
        if external_hospital_name is not None:
            name = _clean_place(external_hospital_name)
            if not name:
                raise ValidationError({'externalHospitalName': 'Indica el centro de la rotación'})
            review.external_hospital_name = name
        if city is not None:
            review.city = _clean_place(city)
        if country is not None:
            review.country = _clean_place(country)
        review.free_comment = clean_text(free_comment)
        review.is_anonymous = bool(is_anonymous)
        review.is_approved = False
        review.approved_at = None
        review.save()
        review.answers.all().delete()
        RotationReviewAnswer.objects.bulk_create(_answer_rows(review, answers))
    log_action(user=ctx.user, action='rotation_review_update', object_type='rotation_review', object_id=review.id)
    return format_rotation_review(review)


def delete_rotation_review(ctx: ActorContext, review_id) -> None:
    review = _own_review(ctx, review_id)
    rid = review.id
    review.delete()
    log_action(user=ctx.user, action='rotation_review_delete', object_type='rotation_review', object_id=rid)


def approve_rotation_review(review_id, moderator=None) -> dict:
    review = RotationReview.objects.select_related('user').filter(id=review_id).first()
    if not review:
        raise NotFoundError('Reseña no encontrada')
    review.is_approved = True
    review.approved_at = timezone.now()
    review.save(update_fields=['is_approved', 'approved_at', 'updated_at'])
    log_action(user=moderator, action='rotation_review_approve', object_type='rotation_review',
               object_id=review.id)
    return format_rotation_review(review, with_answers=False)


def get_rotation_review_detail(review_id, viewer=None) -> dict:
    review = RotationReview.objects.select_related('user').filter(id=review_id).first()
    if not review or not (review.is_approved or getattr(viewer, 'id', None) == review.user_id):
        raise NotFoundError('Reseña no encontrada')
    return format_rotation_review(review)


def list_rotation_reviews(viewer=None, country: Optional[str]=None, city: Optional[str]=None) -> list[dict]:
    """Approved reviews plus the viewer's own, newest first.

    ``country`` and ``city`` match case-insensitively.
    """
    visible = Q(is_approved=True)
    if getattr(viewer, 'id', None):
        visible |= Q(user_id=viewer.id)
    qs = RotationReview.objects.select_related('user').filter(visible)
    if country and country.strip():
        qs = qs.filter(country__iexact=country.strip())
    if city and city.strip():
        qs = qs.filter(city__iexact=city.strip())
    return [format_rotation_review(r, with_answers=False) for r in qs.order_by('-created_at', '-id')]
