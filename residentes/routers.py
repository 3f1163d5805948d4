"""
URL mappings for the residency backend API.

Trailing slashes are omitted to match the paths used by the mobile
client.
"""
from django.urls import path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view
from .views import (
    community, health, hospitals, libro, mir, preferences, profile, reviews, rotation_reviews, shifts,
    student_questions,
)

urlpatterns = [
    path('healthz', health.healthz),

    # Authentication
    path('api/login', login_view),
    path('api/auth/jwt/refresh', jwt_refresh_view),
    path('api/auth/jwt/logout', jwt_logout_view),

    # Profile and external rotations
    path('api/me', profile.me),
    path('api/me/phone-and-rotation', profile.phone_and_rotation),
    path('api/rotations', profile.rotation_list),
    path('api/me/rotations', profile.my_rotations),
    path('api/me/rotations/<int:rotation_id>', profile.my_rotation_detail),

    # Hospital directory
    path('api/hospitals', hospitals.hospital_list),
    path('api/hospitals/initial', hospitals.hospital_initial),
    path('api/hospitals/regions', hospitals.region_list),
    path('api/hospitals/<str:hospital_id>/specialties', hospitals.hospital_specialties),
    path('api/hospitals/<str:hospital_id>/specialties/<str:specialty_id>/grades', hospitals.detailed_grades),
    path('api/specialties', hospitals.specialty_list),
    path('api/specialties/<str:specialty_id>', hospitals.specialty_detail),

    # MIR simulator
    path('api/mir/simulate', mir.mir_simulator),

    # Libro de Residente
    path('api/libro/section', libro.section_data),
    path('api/libro/tree', libro.section_tree),
    path('api/libro/template', libro.template_create),
    path('api/libro/nodes', libro.node_create),
    path('api/libro/nodes/reorder', libro.nodes_reorder),
    path('api/libro/nodes/<int:node_id>', libro.node_detail),
    path('api/libro/nodes/<int:node_id>/move', libro.node_move),
    path('api/libro/entries', libro.entry_create),
    path('api/libro/events', libro.event_create),
    path('api/libro/events/<int:event_id>', libro.event_detail),

    # Preferences
    path('api/preferences', preferences.preference_list),
    path('api/preferences/reorder', preferences.preference_reorder),
    path('api/preferences/<int:preference_id>', preferences.preference_detail),

    # Shifts
    path('api/shifts', shifts.shift_list),
    path('api/shifts/team', shifts.team_shifts),
    path('api/shifts/<int:shift_id>', shifts.shift_detail),
    path('api/shifts/swap-requests', shifts.swap_requests),
    path('api/shifts/swap-requests/<int:request_id>/respond', shifts.swap_request_respond),
    path('api/shifts/purchase-requests', shifts.purchase_requests),
    path('api/shifts/purchase-requests/<int:request_id>/respond', shifts.purchase_request_respond),

    # Reviews
    path('api/reviews/questions', reviews.question_list),
    path('api/reviews', reviews.review_summaries),
    path('api/reviews/mine', reviews.my_review),
    path('api/reviews/mine/<int:review_id>', reviews.my_review_detail),
    path('api/reviews/<int:review_id>', reviews.review_detail),
    path('api/reviews/<int:review_id>/approve', reviews.review_approve),

    # External rotation reviews
    path('api/rotation-reviews/questions', rotation_reviews.question_list),
    path('api/rotation-reviews', rotation_reviews.review_list),
    path('api/rotation-reviews/mine', rotation_reviews.my_review),
    path('api/rotation-reviews/mine/<int:review_id>', rotation_reviews.my_review_detail),
    path('api/rotation-reviews/<int:review_id>', rotation_reviews.review_detail),
    path('api/rotation-reviews/<int:review_id>/approve', rotation_reviews.review_approve),

    # Student questions
    path('api/student-questions', student_questions.question_list),
    path('api/student-questions/can-answer', student_questions.can_answer),
    path('api/student-questions/<int:question_id>', student_questions.question_detail),
    path('api/student-questions/<int:question_id>/answers', student_questions.answer_create),
    path('api/student-answers/<int:answer_id>', student_questions.answer_detail),

    # Resident community
    path('api/community/users', community.community_users),
    path('api/community/cities', community.community_cities),
]
