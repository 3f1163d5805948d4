"""
Questions that prospective residents ask about a hospital/specialty.

Anyone signed in may ask.  Only residents who have reviewed that same
hospital and specialty may answer.  Questions and answers can only be
edited or deleted by whoever wrote them.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db.models import Prefetch
from rest_framework.exceptions import PermissionDenied, ValidationError

from residentes.context import ActorContext
from residentes.exceptions import NotFoundError
from residentes.models import Hospital, Review, Specialty, StudentAnswer, StudentQuestion
from residentes.services.audit import log_action
from residentes.services.reviews import clean_text

logger = logging.getLogger(__name__)


def _author(user) -> dict:
    return {
        'id': user.id,
        'name': user.first_name,
        'surname': user.last_name,
        'user_type': user.user_type,
        'resident_year': user.residency_year,
    }


def format_answer(answer: StudentAnswer) -> dict:
    return {
        'id': answer.id,
        'question_id': answer.question_id,
        'answer_text': answer.answer_text,
        'created_at': answer.created_at.isoformat() if answer.created_at else None,
        'updated_at': answer.updated_at.isoformat() if answer.updated_at else None,
        'user': _author(answer.user),
    }


def format_question(question: StudentQuestion, answers=None) -> dict:
    return {
        'id': question.id,
        'hospital_id': question.hospital_id,
        'speciality_id': question.specialty_id,
        'question_text': question.question_text,
        'created_at': question.created_at.isoformat() if question.created_at else None,
        'updated_at': question.updated_at.isoformat() if question.updated_at else None,
        'user': _author(question.user),
        'answers': [format_answer(a) for a in (answers or [])],
    }


def _required_text(value: Optional[str], field: str) -> str:
    text = clean_text(value)
    if not text:
        raise ValidationError({field: 'El texto no puede estar vacío'})
    return text


def can_answer(ctx: ActorContext, hospital_id, specialty_id) -> bool:
    """Whether the caller has reviewed this hospital and specialty."""
    return Review.objects.filter(user=ctx.user, hospital_id=hospital_id, specialty_id=specialty_id).exists()


def list_questions(hospital_id, specialty_id) -> list[dict]:
    """Questions for one hospital/specialty, newest first, each with its answers oldest first."""
    answers = StudentAnswer.objects.select_related('user').order_by('created_at', 'id')
    qs = (
        StudentQuestion.objects.filter(hospital_id=hospital_id, specialty_id=specialty_id)
        .select_related('user')
        .prefetch_related(Prefetch('answers', queryset=answers))
        .order_by('-created_at', '-id')
    )
    return [format_question(q, q.answers.all()) for q in qs]


def ask_question(ctx: ActorContext, hospital_id, specialty_id, question_text: str) -> dict:
    if not Hospital.objects.filter(id=hospital_id).exists():
        raise NotFoundError('Hospital no encontrado')
    if not Specialty.objects.filter(id=specialty_id).exists():
        raise NotFoundError('Especialidad no encontrada')
    question = StudentQuestion.objects.create(
        hospital_id=hospital_id,
        specialty_id=specialty_id,
        user=ctx.user,
        question_text=_required_text(question_text, 'questionText'),
    )
    log_action(user=ctx.user, action='student_question_create', object_type='student_question',
               object_id=question.id)
    return format_question(question)


def _own_question(ctx: ActorContext, question_id) -> StudentQuestion:
    question = StudentQuestion.objects.select_related('user').filter(id=question_id, user=ctx.user).first()
    if not question:
        raise NotFoundError('Pregunta no encontrada')
    return question


def edit_question(ctx: ActorContext, question_id, question_text: str) -> dict:
    question = _own_question(ctx, question_id)
    question.question_text = _required_text(question_text, 'questionText')
    question.save(update_fields=['question_text', 'updated_at'])
    return format_question(question, question.answers.select_related('user').order_by('created_at', 'id'))


def delete_question(ctx: ActorContext, question_id) -> None:
    question = _own_question(ctx, question_id)
    qid = question.id
    question.delete()
    log_action(user=ctx.user, action='student_question_delete', object_type='student_question', object_id=qid)


def answer_question(ctx: ActorContext, question_id, answer_text: str) -> dict:
    question = StudentQuestion.objects.filter(id=question_id).first()
    if not question:
        raise NotFoundError('Pregunta no encontrada')
    if not can_answer(ctx, question.hospital_id, question.specialty_id):
        logger.info('user %s may not answer question %s', ctx.user_id, question.id)
        raise PermissionDenied('Solo pueden responder residentes que hayan reseñado este hospital y especialidad')
    answer = StudentAnswer.objects.create(
        question=question,
        user=ctx.user,
        answer_text=_required_text(answer_text, 'answerText'),
    )
    log_action(user=ctx.user, action='student_answer_create', object_type='student_answer', object_id=answer.id)
    return format_answer(answer)


def _own_answer(ctx: ActorContext, answer_id) -> StudentAnswer:
    answer = StudentAnswer.objects.select_related('user').filter(id=answer_id, user=ctx.user).first()
    if not answer:
        raise NotFoundError('Respuesta no encontrada')
    return answer


def edit_answer(ctx: ActorContext, answer_id, answer_text: str) -> dict:
    answer = _own_answer(ctx, answer_id)
    answer.answer_text = _required_text(answer_text, 'answerText')
    answer.save(update_fields=['answer_text', 'updated_at'])
    return format_answer(answer)


def delete_answer(ctx: ActorContext, answer_id) -> None:
    answer = _own_answer(ctx, answer_id)
    aid = answer.id
    answer.delete()
    log_action(user=ctx.user, action='student_answer_delete', object_type='student_answer', object_id=aid)
