"""
Management command to populate the database with demo directory data.
"""
import random

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from residentes.models import (
    Hospital, HospitalSpecialty, HospitalSpecialtyGrade, ReviewQuestion, RotationReviewQuestion, Specialty, User,
)


class Command(BaseCommand):
    help = 'Populate database with demo hospitals, specialties, cutoff ranks and questionnaires'

    def add_arguments(self, parser):
        parser.add_argument('--seed', type=int, default=2025, help='random seed for the cutoff ranks')

    def handle(self, *args, **options):
        random.seed(options['seed'])
        self.stdout.write('Creando datos de prueba...')

        specialties = self.create_specialties()
        hospitals = self.create_hospitals()
        self.create_offerings(hospitals, specialties)
        self.create_questions()
        self.create_residents(hospitals, specialties)

        self.stdout.write(self.style.SUCCESS('Datos de prueba creados'))

    def create_specialties(self):
        specialties_data = [
            ('cardiologia', 'Cardiología'),
            ('dermatologia', 'Dermatología'),
            ('medicina-familiar', 'Medicina Familiar y Comunitaria'),
            ('medicina-interna', 'Medicina Interna'),
            ('pediatria', 'Pediatría'),
            ('psiquiatria', 'Psiquiatría'),
        ]
        specialties = []
        for sid, name in specialties_data:
            specialty, _ = Specialty.objects.get_or_create(id=sid, defaults={'name': name})
            specialties.append(specialty)
            self.stdout.write(f'Especialidad: {specialty.name}')
        return specialties

    def create_hospitals(self):
        hospitals_data = [
            {'id': 'h-gregorio-maranon', 'name': 'Hospital General Universitario Gregorio Marañón',
             'city': 'Madrid', 'region': 'Comunidad de Madrid', 'latitude': 40.4184, 'longitude': -3.6707,
             'email_domains': ['salud.madrid.org']},
            {'id': 'h-la-paz', 'name': 'Hospital Universitario La Paz',
             'city': 'Madrid', 'region': 'Comunidad de Madrid', 'latitude': 40.4812, 'longitude': -3.6868,
             'email_domains': ['salud.madrid.org']},
            {'id': 'h-clinic', 'name': 'Hospital Clínic de Barcelona',
             'city': 'Barcelona', 'region': 'Cataluña', 'latitude': 41.3894, 'longitude': 2.1525,
             'email_domains': ['clinic.cat']},
            {'id': 'h-virgen-rocio', 'name': 'Hospital Universitario Virgen del Rocío',
             'city': 'Sevilla', 'region': 'Andalucía', 'latitude': 37.3614, 'longitude': -5.9800,
             'email_domains': ['juntadeandalucia.es']},
            {'id': 'ud-mfyc-madrid-centro', 'name': 'UD MFyC Madrid Centro',
             'city': 'Madrid', 'region': 'Comunidad de Madrid', 'latitude': None, 'longitude': None,
             'email_domains': []},
        ]
        hospitals = []
        for data in hospitals_data:
            hospital, _ = Hospital.objects.get_or_create(id=data['id'], defaults=data)
            hospitals.append(hospital)
            self.stdout.write(f'Hospital: {hospital.name}')
        return hospitals

    def create_offerings(self, hospitals, specialties):
        for hospital in hospitals:
            offered = specialties[:2] if hospital.id.startswith('ud-') else specialties
            for specialty in offered:
                HospitalSpecialty.objects.get_or_create(hospital=hospital, specialty=specialty)
                for year in range(2019, 2026):
                    # a missing year is a year without published cutoff
                    if random.random() < 0.15:
                        continue
                    slots = random.randint(1, 6)
                    base = random.randint(200, 9000)
                    grades = sorted(base + random.randint(0, 400) for _ in range(slots))
                    HospitalSpecialtyGrade.objects.get_or_create(
                        hospital=hospital, specialty=specialty, year=year,
                        defaults={'grades': grades, 'slots': slots},
                    )
        self.stdout.write(f'Notas de corte: {HospitalSpecialtyGrade.objects.count()}')

    def create_questions(self):
        questions = [
            ('¿Cómo valoras la docencia recibida?', 'rating', False),
            ('¿Cómo valoras el ambiente con los adjuntos?', 'rating', False),
            ('¿Cómo valoras la carga de guardias?', 'rating', False),
            ('¿Qué destacarías de la unidad?', 'text', True),
        ]
        for position, (text, qtype, optional) in enumerate(questions):
            ReviewQuestion.objects.get_or_create(
                text=text, defaults={'type': qtype, 'is_optional': optional, 'position': position},
            )

        rotation_questions = [
            ('¿Cómo valoras la acogida del servicio?', 'rating', False),
            ('¿Cuánto aprendiste durante la rotación?', 'rating', False),
            ('Consejos para quien vaya a rotar allí', 'text', True),
        ]
        for position, (text, qtype, optional) in enumerate(rotation_questions):
            RotationReviewQuestion.objects.get_or_create(
                text=text, defaults={'type': qtype, 'is_optional': optional, 'position': position},
            )

    def create_residents(self, hospitals, specialties):
        for i in range(1, 7):
            hospital = hospitals[i % 4]
            specialty = specialties[i % 3]
            user, created = User.objects.get_or_create(
                username=f'residente{i}',
                defaults={
                    'email': f'residente{i}@example.com',
                    'password': make_password('123456'),
                    'user_type': 'resident',
                    'hospital': hospital,
                    'city': hospital.city,
                    'specialty': specialty,
                    'residency_year': (i % 4) + 1,
                    'first_name': f'Residente{i}',
                    'last_name': 'Demo',
                },
            )
            self.stdout.write(f'Residente: {user.username} ({hospital.id}/{specialty.id})')
