"""
Django admin registrations for the residency models.

Besides inspecting data, the admin is where moderators approve reviews
before they become public.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    ExternalRotation,
    Hospital,
    HospitalPreference,
    HospitalSpecialtyGrade,
    LibroNode,
    MirSimulatorSearch,
    Review,
    ReviewAnswer,
    ReviewQuestion,
    RotationReview,
    RotationReviewAnswer,
    RotationReviewQuestion,
    Shift,
    Specialty,
    StudentAnswer,
    StudentQuestion,
    User,
)
from .services.reviews import approve_review
from .services.rotation_reviews import approve_rotation_review


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'city', 'region')
    list_filter = ('region',)
    search_fields = ('id', 'name', 'city')


@admin.register(Specialty)
class SpecialtyAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')
    search_fields = ('id', 'name')


@admin.register(HospitalSpecialtyGrade)
class HospitalSpecialtyGradeAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'specialty', 'year', 'slots')
    list_filter = ('year', 'specialty')
    search_fields = ('hospital__name',)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'user_type', 'hospital', 'specialty', 'city', 'residency_year', 'is_staff')
    list_filter = ('user_type', 'is_staff')
    search_fields = ('username', 'first_name', 'last_name', 'work_email')


@admin.register(LibroNode)
class LibroNodeAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'section', 'parent', 'position')
    list_filter = ('section',)
    search_fields = ('name', 'user__username')


@admin.register(HospitalPreference)
class HospitalPreferenceAdmin(admin.ModelAdmin):
    list_display = ('user', 'position', 'hospital', 'specialty')
    search_fields = ('user__username', 'hospital__name')


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ('user', 'date', 'type', 'price_eur')
    list_filter = ('type',)
    date_hierarchy = 'date'


@admin.register(ReviewQuestion)
class ReviewQuestionAdmin(admin.ModelAdmin):
    list_display = ('text', 'type', 'is_optional', 'is_active', 'position')
    list_editable = ('is_active', 'position')


class ReviewAnswerInline(admin.TabularInline):
    model = ReviewAnswer
    extra = 0


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'specialty', 'user', 'is_anonymous', 'is_approved', 'created_at')
    list_filter = ('is_approved', 'specialty')
    search_fields = ('hospital__name', 'user__username')
    inlines = [ReviewAnswerInline]
    actions = ['approve_selected']

    @admin.action(description='Aprobar reseñas seleccionadas')
    def approve_selected(self, request, queryset):
        for review in queryset.filter(is_approved=False):
            approve_review(review.id, moderator=request.user)


@admin.register(ExternalRotation)
class ExternalRotationAdmin(admin.ModelAdmin):
    list_display = ('user', 'city', 'country', 'start_date', 'end_date', 'latitude', 'longitude')


@admin.register(RotationReviewQuestion)
class RotationReviewQuestionAdmin(admin.ModelAdmin):
    list_display = ('text', 'type', 'is_optional', 'is_active', 'position')
    list_editable = ('is_active', 'position')


class RotationReviewAnswerInline(admin.TabularInline):
    model = RotationReviewAnswer
    extra = 0


@admin.register(RotationReview)
class RotationReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'external_hospital_name', 'city', 'country', 'user', 'is_approved', 'created_at')
    list_filter = ('is_approved', 'country')
    search_fields = ('external_hospital_name', 'city', 'user__username')
    inlines = [RotationReviewAnswerInline]
    actions = ['approve_selected']

    @admin.action(description='Aprobar reseñas seleccionadas')
    def approve_selected(self, request, queryset):
        for review in queryset.filter(is_approved=False):
            approve_rotation_review(review.id, moderator=request.user)


class StudentAnswerInline(admin.TabularInline):
    model = StudentAnswer
    extra = 0


@admin.register(StudentQuestion)
class StudentQuestionAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'specialty', 'user', 'created_at')
    list_filter = ('specialty',)
    search_fields = ('question_text', 'hospital__name')
    inlines = [StudentAnswerInline]


@admin.register(MirSimulatorSearch)
class MirSimulatorSearchAdmin(admin.ModelAdmin):
    list_display = ('user', 'grade', 'specialty', 'created_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
