"""
Hospital/specialty reviews.

A review is a set of answers to the active questionnaire plus an optional
free comment.  Reviews are moderated: they are only listed publicly once
approved, and every edit sends them back to moderation.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import bleach
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from residentes.context import ActorContext
from residentes.exceptions import ConflictError, NotFoundError
from residentes.models import Hospital, Review, ReviewAnswer, ReviewQuestion, Specialty
from residentes.services.audit import log_action

logger = logging.getLogger(__name__)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip every HTML tag from user supplied text; blank becomes ``None``."""
    if value is None:
        return None
    cleaned = bleach.clean(value, tags=set(), strip=True).strip()
    return cleaned or None


def format_question(q: ReviewQuestion) -> dict:
    return {'id': q.id, 'text': q.text, 'type': q.type, 'is_optional': q.is_optional, 'position': q.position}


def list_questions() -> list[dict]:
    return [format_question(q) for q in ReviewQuestion.objects.filter(is_active=True).order_by('position', 'id')]


def format_review(review: Review, *, with_answers: bool=True) -> dict:
    data = {
        'id': review.id,
        'user_id': None if review.is_anonymous else review.user_id,
        'hospital_id': review.hospital_id,
        'speciality_id': review.specialty_id,
        'free_comment': review.free_comment,
        'is_anonymous': review.is_anonymous,
        'is_approved': review.is_approved,
        'approved_at': review.approved_at.isoformat() if review.approved_at else None,
        'created_at': review.created_at.isoformat() if review.created_at else None,
        'updated_at': review.updated_at.isoformat() if review.updated_at else None,
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


def validated_answers(answers: Iterable[dict], question_model=ReviewQuestion) -> list[tuple]:
    """Return ``(question, rating, text)`` for each answer that carries a value.

    Each question may be answered once; ratings go to ``rating`` questions
    only and must lie in 1..5.
    """
    answers = list(answers or [])
    questions = question_model.objects.in_bulk([a.get('question_id') for a in answers])
    seen = set()
    rows = []
    for answer in answers:
        question = questions.get(answer.get('question_id'))
        if question is None:
            raise ValidationError({'answers': f"Pregunta desconocida: {answer.get('question_id')}"})
        if question.id in seen:
            raise ValidationError({'answers': f'Pregunta respondida dos veces: {question.id}'})
        seen.add(question.id)
        rating = answer.get('rating_value')
        text = clean_text(answer.get('text_value'))
        if rating is None and not text:
            continue
        if rating is not None:
            if question.type != 'rating':
                raise ValidationError({'answers': f'La pregunta {question.id} no admite valoración'})
            if not 1 <= int(rating) <= 5:
                raise ValidationError({'answers': 'La valoración debe estar entre 1 y 5'})
        rows.append((question, rating, text))
    return rows


def check_required(answers: Iterable[dict], question_model=ReviewQuestion) -> None:
    answered = {
        a.get('question_id') for a in answers or []
        if a.get('rating_value') is not None or clean_text(a.get('text_value'))
    }
    missing = question_model.objects.filter(is_active=True, is_optional=False).exclude(id__in=answered)
    if missing.exists():
        raise ValidationError({'answers': 'Faltan respuestas obligatorias'})


def _answer_rows(review: Review, answers: Iterable[dict]) -> list[ReviewAnswer]:
    return [
        ReviewAnswer(review=review, question=question, rating_value=rating, text_value=text)
        for question, rating, text in validated_answers(answers)
    ]


def _own_review(ctx: ActorContext, review_id) -> Review:
    review = Review.objects.filter(id=review_id, user=ctx.user).first()
    if not review:
        raise NotFoundError('Reseña no encontrada')
    return review


def get_my_review(ctx: ActorContext, hospital_id, specialty_id) -> Optional[dict]:
    review = Review.objects.filter(user=ctx.user, hospital_id=hospital_id, specialty_id=specialty_id).first()
    return format_review(review) if review else None


def create_review(ctx: ActorContext, hospital_id, specialty_id, answers, free_comment: Optional[str]=None,
                  is_anonymous: bool=False) -> dict:
    if not Hospital.objects.filter(id=hospital_id).exists():
        raise NotFoundError('Hospital no encontrado')
    if not Specialty.objects.filter(id=specialty_id).exists():
        raise NotFoundError('Especialidad no encontrada')
    check_required(answers)
    if Review.objects.filter(user=ctx.user, hospital_id=hospital_id, specialty_id=specialty_id).exists():
        raise ConflictError('Ya has escrito una reseña para este hospital y especialidad')
    try:
        with transaction.atomic():
            review = Review.objects.create(
                user=ctx.user,
                hospital_id=hospital_id,
                specialty_id=specialty_id,
                free_comment=clean_text(free_comment),
                is_anonymous=bool(is_anonymous),
                is_approved=False,
            )
            ReviewAnswer.objects.bulk_create(_answer_rows(review, answers))
    except IntegrityError:
        raise ConflictError('Ya has escrito una reseña para este hospital y especialidad')
    log_action(user=ctx.user, action='review_create', object_type='review', object_id=review.id)
    return format_review(review)


def update_review(ctx: ActorContext, review_id, answers, free_comment: Optional[str]=None,
                  is_anonymous: bool=False) -> dict:
    """Replace the answers and comment of an own review; it goes back to moderation."""
    review = _own_review(ctx, review_id)
    check_required(answers)
    with transaction.atomic():
        review.free_comment = clean_text(free_comment)
        review.is_anonymous = bool(is_anonymous)
        review.is_approved = False
        review.approved_at = None
        review.save()
        review.answers.all().delete()
        ReviewAnswer.objects.bulk_create(_answer_rows(review, answers))
    log_action(user=ctx.user, action='review_update', object_type='review', object_id=review.id)
    return format_review(review)


def delete_review(ctx: ActorContext, review_id) -> None:
    review = _own_review(ctx, review_id)
    rid = review.id
    review.delete()
    log_action(user=ctx.user, action='review_delete', object_type='review', object_id=rid)


def approve_review(review_id, moderator=None) -> dict:
    review = Review.objects.filter(id=review_id).first()
    if not review:
        raise NotFoundError('Reseña no encontrada')
    review.is_approved = True
    review.approved_at = timezone.now()
    review.save(update_fields=['is_approved', 'approved_at', 'updated_at'])
    log_action(user=moderator, action='review_approve', object_type='review', object_id=review.id)
    return format_review(review, with_answers=False)


def get_review_detail(review_id, viewer=None) -> dict:
    """An approved review, or an unapproved one to its own author."""
    review = (
        Review.objects.select_related('hospital', 'specialty', 'user')
        .filter(id=review_id).first()
    )
    if not review or not (review.is_approved or getattr(viewer, 'id', None) == review.user_id):
        raise NotFoundError('Reseña no encontrada')
    data = format_review(review)
    data['hospital'] = {'id': review.hospital.id, 'name': review.hospital.name,
                        'city': review.hospital.city, 'region': review.hospital.region}
    data['speciality'] = {'id': review.specialty.id, 'name': review.specialty.name}
    if not review.is_anonymous:
        data['user'] = {
            'id': review.user.id,
            'name': review.user.first_name,
            'surname': review.user.last_name,
            'resident_year': review.user.residency_year,
        }
    return data


def review_summaries(hospital_id=None, specialty_id=None, search: Optional[str]=None) -> list[dict]:
    """One summary per (hospital, specialty) with approved reviews, latest first."""
    qs = Review.objects.filter(is_approved=True).select_related('hospital', 'specialty')
    if hospital_id:
        qs = qs.filter(hospital_id=hospital_id)
    if specialty_id:
        qs = qs.filter(specialty_id=specialty_id)
    if search and search.strip():
        qs = qs.filter(hospital__name__icontains=search.strip())

    summaries: dict[tuple, dict] = {}
    for review in qs.order_by('-created_at', '-id'):
        key = (review.hospital_id, review.specialty_id)
        if key in summaries:
            summaries[key]['review_count'] += 1
            continue
        summaries[key] = {
            'review_id': review.id,
            'hospital_id': review.hospital_id,
            'speciality_id': review.specialty_id,
            'hospital_name': review.hospital.name or '',
            'hospital_city': review.hospital.city or '',
            'hospital_region': review.hospital.region or '',
            'speciality_name': review.specialty.name or '',
            'latest_review_date': review.created_at.isoformat() if review.created_at else None,
            'review_count': 1,
        }
    return list(summaries.values())
