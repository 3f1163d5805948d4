from typing import Optional

from residentes.exceptions import NotFoundError
from residentes.models import HospitalSpecialtyGrade, Specialty
from residentes.services import directory
from residentes.services.mir import collation_key, mir_years, normalize_cutoff


def _is_teaching_unit(hospital: dict) -> bool:
    return (hospital.get('name') or '').lower().startswith('ud')


def list_hospitals(*, search: Optional[str]=None, region: Optional[str]=None,
                   city: Optional[str]=None, specialty_id: Optional[str]=None) -> list[dict]:
    counts = directory.get_specialty_counts()
    hospitals = [{**h, 'specialtyCount': counts.get(h['id'], 0)} for h in directory.get_hospitals()]
    if specialty_id:
        offering = set(directory.get_hospital_ids_by_specialty(specialty_id))
        hospitals = [h for h in hospitals if h['id'] in offering]
    if search:
        needle = search.lower()
        hospitals = [h for h in hospitals if needle in (h.get('name') or '').lower()]
    if region:
        hospitals = [h for h in hospitals if h.get('region') == region]
    if city:
        hospitals = [h for h in hospitals if (h.get('city') or '').lower() == city.lower()]
    return hospitals


def list_regions() -> list[str]:
    regions = {h['region'] for h in directory.get_hospitals() if h.get('region')}
    return sorted(regions, key=collation_key)


def initial_hospitals(limit: int=10) -> list[dict]:
    """First ``limit`` directory hospitals, skipping teaching units ("Ud ...")."""
    return [h for h in directory.get_hospitals() if not _is_teaching_unit(h)][:limit]


def list_specialties() -> list[dict]:
    return [{'id': s.id, 'name': s.name} for s in Specialty.objects.order_by('name')]


def get_specialty(specialty_id) -> dict:
    specialty = Specialty.objects.filter(id=specialty_id).first()
    if not specialty:
        raise NotFoundError('Especialidad no encontrada')
    return {'id': specialty.id, 'name': specialty.name}


def get_hospital_specialties(hospital_id) -> list[dict]:
    """Specialties of a hospital with the highest cutoff per year and the latest slots."""
    years = mir_years()
    by_specialty: dict[str, dict] = {}
    latest_slots_year: dict[str, int] = {}
    qs = HospitalSpecialtyGrade.objects.filter(hospital_id=hospital_id).select_related('specialty')
    for record in qs.order_by('specialty__name', 'year'):
        row = by_specialty.setdefault(record.specialty_id, {
            'id': record.specialty_id,
            'name': record.specialty.name,
            **{f'grade_{year}': None for year in years},
            'slots': None,
        })
        field = f'grade_{record.year}'
        cutoff = normalize_cutoff(record.grades)
        if field in row and cutoff is not None:
            if row[field] is None or cutoff > row[field]:
                row[field] = cutoff
        if record.slots is not None and record.year >= latest_slots_year.get(record.specialty_id, 0):
            row['slots'] = record.slots
            latest_slots_year[record.specialty_id] = record.year
    return list(by_specialty.values())


def _numbers(value) -> list:
    values = value if isinstance(value, list) else [value]
    numbers = []
    for v in values:
        n = normalize_cutoff(v)
        if n is not None:
            numbers.append(n)
    return numbers


def get_detailed_grades(hospital_id, specialty_id) -> list[dict]:
    """Every admitted rank per year (descending), most recent year first."""
    by_year: dict[int, dict] = {}
    qs = HospitalSpecialtyGrade.objects.filter(hospital_id=hospital_id, specialty_id=specialty_id)
    for record in qs.order_by('-year'):
        row = by_year.setdefault(record.year, {'year': record.year, 'slots': record.slots or 0, 'grades': []})
        row['grades'].extend(_numbers(record.grades))
        if record.slots is not None:
            row['slots'] = record.slots
    result = []
    for year in sorted(by_year, reverse=True):
        row = by_year[year]
        row['grades'].sort(reverse=True)
        result.append(row)
    return result
