"""
Student question endpoints.

Questions are public to read.  Asking needs an account; answering needs a
review of the same hospital and specialty.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from ..context import resolve_current_user
from ..serializers.student_questions import (
    StudentAnswerSerializer,
    StudentQuestionCreateSerializer,
    StudentQuestionEditSerializer,
    StudentQuestionQuerySerializer,
)
from ..services import student_questions


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def question_list(request):
    """``GET ?hospitalId=&specialtyId=`` lists questions newest first; ``POST`` asks one."""
    if request.method == 'GET':
        s = StudentQuestionQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        data = student_questions.list_questions(s.validated_data['hospitalId'], s.validated_data['specialtyId'])
        return Response({'ok': True, 'data': data})

    ctx = resolve_current_user(request)
    s = StudentQuestionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    question = student_questions.ask_question(ctx, v['hospitalId'], v['specialtyId'], v['questionText'])
    return Response({'ok': True, 'data': question}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def can_answer(request):
    ctx = resolve_current_user(request)
    s = StudentQuestionQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    allowed = student_questions.can_answer(ctx, s.validated_data['hospitalId'], s.validated_data['specialtyId'])
    return Response({'ok': True, 'data': {'can_answer': allowed}})


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def question_detail(request, question_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        student_questions.delete_question(ctx, question_id)
        return Response({'ok': True})

    s = StudentQuestionEditSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = student_questions.edit_question(ctx, question_id, s.validated_data['questionText'])
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def answer_create(request, question_id: int):
    ctx = resolve_current_user(request)
    s = StudentAnswerSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = student_questions.answer_question(ctx, question_id, s.validated_data['answerText'])
    return Response({'ok': True, 'data': data}, status=201)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def answer_detail(request, answer_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        student_questions.delete_answer(ctx, answer_id)
        return Response({'ok': True})

    s = StudentAnswerSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': student_questions.edit_answer(ctx, answer_id, s.validated_data['answerText'])})
