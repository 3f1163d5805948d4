"""
Database models for the residency backend.

These models capture the core concepts of the system such as users,
hospitals and specialties, the resident activity log ("Libro de
Residente"), shift scheduling, peer reviews and external rotations.
Where possible the field names mirror the JSON exposed to the mobile
client to simplify the transformation to JSON responses.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Hospital(models.Model):
    """A teaching hospital from the national directory.

    The primary key is the short string identifier used by the static
    directory documents so that both sources can be joined by id.
    """
    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)
    city = models.CharField(max_length=120, blank=True)
    # Comunidad autónoma; the simulator filters on it
    region = models.CharField(max_length=120, blank=True, db_index=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    email_domains = models.JSONField(default=list, blank=True)
    salary_r1_fixed_eur = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)
    salary_r2_fixed_eur = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)
    salary_r3_fixed_eur = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)
    salary_r4_fixed_eur = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Specialty(models.Model):
    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'specialties'

    def __str__(self) -> str:
        return self.name


class HospitalSpecialty(models.Model):
    """Links a hospital to a specialty it offers residency places for."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='offerings')
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='offerings')

    class Meta:
        unique_together = [('hospital', 'specialty')]

    def __str__(self) -> str:
        return f"{self.hospital_id} offers {self.specialty_id}"


class HospitalSpecialtyGrade(models.Model):
    """Historical cutoff rank for a hospital/specialty in a given year.

    ``grades`` keeps whatever the import delivered: a single number, a
    numeric string or a list with the ranks of every admitted candidate.
    The effective cutoff is normalized by :mod:`residentes.services.mir`.
    """
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='grades')
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='grades')
    year = models.PositiveSmallIntegerField(db_index=True)
    grades = models.JSONField(null=True, blank=True)
    slots = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['specialty', 'hospital', 'year'], name='grade_spec_hosp_year_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.hospital_id}/{self.specialty_id} {self.year}: {self.grades}"


class User(AbstractUser):
    """Custom user model for residents and medical students.

    A resident is bound to the hospital and specialty where they train;
    students usually leave both empty.
    """
    USER_TYPE_CHOICES = [
        ('resident', 'Resident'),
        ('student', 'Student'),
    ]
    user_type = models.CharField(max_length=10, choices=USER_TYPE_CHOICES, default='resident')
    phone = models.CharField(max_length=32, blank=True)
    work_email = models.EmailField(blank=True)
    city = models.CharField(max_length=120, blank=True, db_index=True)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    specialty = models.ForeignKey(
        Specialty, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    residency_year = models.PositiveSmallIntegerField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.user_type})"


class LibroNode(models.Model):
    """A category or subcategory of the resident activity log.

    Nodes form a forest per (user, section).  ``position`` orders
    siblings for display; it is rewritten for every sibling on reorder.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='libro_nodes')
    section = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    parent = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.CASCADE, related_name='children'
    )
    goal = models.CharField(max_length=255, null=True, blank=True)
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['user', 'section', 'position'], name='libro_node_order_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.section})"


class LibroEntry(models.Model):
    """An immutable count increment (or decrement) logged against a node."""
    node = models.ForeignKey(LibroNode, on_delete=models.CASCADE, related_name='entries')
    section = models.CharField(max_length=64)
    count = models.IntegerField(default=1)
    residency_year = models.PositiveSmallIntegerField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"entry {self.id} node={self.node_id} {self.count:+d}"


class LibroEvent(models.Model):
    """A dated event; always backed by exactly one entry with ``count = 1``."""
    entry = models.OneToOneField(LibroEntry, on_delete=models.CASCADE, related_name='event')
    node = models.ForeignKey(LibroNode, on_delete=models.CASCADE, related_name='events')
    event_date = models.DateField()
    title = models.CharField(max_length=255, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    location = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"event {self.id} node={self.node_id} @ {self.event_date}"


class HospitalPreference(models.Model):
    """A hospital/specialty pair in the user's ranked wish list."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='preferences')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='preferences')
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='preferences')
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('user', 'hospital', 'specialty')]

    def __str__(self) -> str:
        return f"{self.user_id}: #{self.position} {self.hospital_id}/{self.specialty_id}"


class Shift(models.Model):
    """An on-call shift (guardia)."""
    TYPE_CHOICES = [
        ('regular', 'Regular'),
        ('saturday', 'Saturday'),
        ('sunday', 'Sunday'),
    ]
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='shifts')
    date = models.DateField(db_index=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='regular')
    notes = models.TextField(null=True, blank=True)
    price_eur = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Shift({self.user_id} {self.date:%F} {self.type})"


class ShiftSwapRequest(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_ACCEPTED, 'accepted'),
        (STATUS_REJECTED, 'rejected'),
    )

    requester_shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='swap_requests_sent')
    target_shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='swap_requests_received')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"swap {self.requester_shift_id} -> {self.target_shift_id} ({self.status})"


class ShiftPurchaseRequest(models.Model):
    # Upper case statuses are what the mobile client stores for purchases
    STATUS_PENDING = 'PENDING'
    STATUS_ACCEPTED = 'ACCEPTED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'PENDING'),
        (STATUS_ACCEPTED, 'ACCEPTED'),
        (STATUS_REJECTED, 'REJECTED'),
    )

    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='purchase_requests')
    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name='shift_purchases')
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='shift_sales')
    offered_price_eur = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"purchase shift={self.shift_id} buyer={self.buyer_id} ({self.status})"


class ReviewQuestion(models.Model):
    TYPE_CHOICES = [
        ('rating', 'Rating'),
        ('text', 'Text'),
    ]
    text = models.CharField(max_length=500)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='rating')
    is_optional = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    position = models.IntegerField(default=0)

    def __str__(self) -> str:
        return self.text[:40]


class Review(models.Model):
    """A resident's review of their hospital/specialty.

    Reviews are moderated: creating or editing one resets
    ``is_approved`` until a moderator approves it again.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reviews')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='reviews')
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='reviews')
    free_comment = models.TextField(null=True, blank=True)
    is_anonymous = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=False, db_index=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('user', 'hospital', 'specialty')]

    def __str__(self) -> str:
        return f"review {self.id} {self.hospital_id}/{self.specialty_id}"


class ReviewAnswer(models.Model):
    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name='answers')
    question = models.ForeignKey(ReviewQuestion, on_delete=models.CASCADE, related_name='answers')
    rating_value = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    text_value = models.TextField(null=True, blank=True)

    def __str__(self) -> str:
        return f"answer {self.review_id}/{self.question_id}"


class ExternalRotation(models.Model):
    """An external rotation; an empty ``end_date`` means it is ongoing."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='external_rotations')
    latitude = models.FloatField()
    longitude = models.FloatField()
    city = models.CharField(max_length=120, blank=True)
    country = models.CharField(max_length=120, blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"rotation {self.id} user={self.user_id} from {self.start_date}"


class RotationReviewQuestion(models.Model):
    """Questionnaire for external rotation reviews, separate from the hospital one."""
    TYPE_CHOICES = ReviewQuestion.TYPE_CHOICES
    text = models.CharField(max_length=500)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='rating')
    is_optional = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    position = models.IntegerField(default=0)

    def __str__(self) -> str:
        return self.text[:40]


class RotationReview(models.Model):
    """A review of the centre where an external rotation took place.

    Dates are copied from the rotation when the review is written.  Like
    hospital reviews, every edit sends it back to moderation.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='rotation_reviews')
    rotation = models.ForeignKey(ExternalRotation, on_delete=models.CASCADE, related_name='reviews')
    external_hospital_name = models.CharField(max_length=255)
    city = models.CharField(max_length=120, blank=True, db_index=True)
    country = models.CharField(max_length=120, blank=True, db_index=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    free_comment = models.TextField(null=True, blank=True)
    is_anonymous = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=False, db_index=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('user', 'rotation')]

    def __str__(self) -> str:
        return f"rotation review {self.id} {self.external_hospital_name}"


class RotationReviewAnswer(models.Model):
    review = models.ForeignKey(RotationReview, on_delete=models.CASCADE, related_name='answers')
    question = models.ForeignKey(RotationReviewQuestion, on_delete=models.CASCADE, related_name='answers')
    rating_value = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    text_value = models.TextField(null=True, blank=True)


class StudentQuestion(models.Model):
    """A question asked about a hospital/specialty, answered by its residents."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='student_questions')
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='student_questions')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='student_questions')
    question_text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'specialty', 'created_at'], name='student_question_idx'),
        ]

    def __str__(self) -> str:
        return f"question {self.id} {self.hospital_id}/{self.specialty_id}"


class StudentAnswer(models.Model):
    question = models.ForeignKey(StudentQuestion, on_delete=models.CASCADE, related_name='answers')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='student_answers')
    answer_text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"answer {self.id} to question {self.question_id}"


class MirSimulatorSearch(models.Model):
    """Log of admission simulator searches made by signed-in users."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='mir_searches')
    grade = models.PositiveIntegerField()
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='mir_searches')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"mir search {self.user_id} #{self.grade} {self.specialty_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
