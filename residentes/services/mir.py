"""
MIR admission probability estimator.

For a candidate's rank (lower is better) and a specialty, every hospital
offering the specialty gets the share of past years whose cutoff rank the
candidate would have beaten::

    probability = round(100 * |{year : rank <= cutoff}| / |years with a cutoff|)

Years without a usable cutoff are left out of both counts.  A hospital with
no usable year at all gets ``"NA"``, which is distinct from ``"0%"`` and
always sorts after the numeric results.
"""
from __future__ import annotations

import logging
import unicodedata
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from rest_framework.exceptions import ValidationError

from residentes.context import ActorContext
from residentes.models import HospitalSpecialtyGrade, MirSimulatorSearch
from residentes.services import directory

logger = logging.getLogger(__name__)

NA = 'NA'


def mir_years() -> list[int]:
    """The configured year window, most recent first."""
    return list(range(settings.MIR_LAST_YEAR, settings.MIR_FIRST_YEAR - 1, -1))


def _to_number(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return float(value)
        except ValueError:
            return None
    return None


def normalize_cutoff(value):
    """Effective cutoff rank of a stored grade value, or ``None``.

    Lists hold the rank of every admitted candidate; the last admitted
    (highest rank) is the cutoff.
    """
    if isinstance(value, list):
        numbers = [n for n in (_to_number(v) for v in value) if n is not None]
        return max(numbers) if numbers else None
    return _to_number(value)


def cutoff_series(records: Iterable, years: Optional[Iterable[int]] = None) -> dict[int, Optional[float]]:
    """Map every year of the window to its highest cutoff (``None`` when absent).

    ``records`` are grade rows or mappings with ``year`` and ``grades``.
    """
    years = list(years) if years is not None else mir_years()
    series: dict[int, Optional[float]] = {year: None for year in years}
    for record in records:
        if isinstance(record, dict):
            raw_year, raw_grade = record.get('year'), record.get('grades')
        else:
            raw_year, raw_grade = record.year, record.grades
        try:
            year = int(raw_year)
        except (TypeError, ValueError):
            continue
        if year not in series:
            continue
        cutoff = normalize_cutoff(raw_grade)
        if cutoff is None:
            continue
        if series[year] is None or cutoff > series[year]:
            series[year] = cutoff
    return series


def estimate_probability(user_rank, cutoffs: dict) -> str:
    valid = [c for c in cutoffs.values() if c is not None]
    if not valid:
        return NA
    matches = sum(1 for c in valid if user_rank <= c)
    pct = (Decimal(100 * matches) / Decimal(len(valid))).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return f"{int(pct)}%"


def collation_key(name: Optional[str]) -> str:
    """Accent and case insensitive sort key for Spanish names."""
    decomposed = unicodedata.normalize('NFKD', name or '')
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _result_sort_key(result: dict):
    probability = result['probability']
    hospital = result.get('hospital') or {}
    name = collation_key(hospital.get('name'))
    if probability == NA:
        return (1, 0, name)
    return (0, -int(probability.rstrip('%')), name)


def sort_results(results: Iterable[dict]) -> list[dict]:
    """Highest probability first, ``NA`` last, ties by hospital name."""
    return sorted(results, key=_result_sort_key)


def _log_search(ctx: Optional[ActorContext], user_rank: int, specialty_id: str) -> None:
    if ctx is None:
        return
    try:
        with transaction.atomic():
            MirSimulatorSearch.objects.create(user=ctx.user, grade=user_rank, specialty_id=specialty_id)
    except DatabaseError:
        logger.exception('could not log MIR search for user %s', ctx.user_id)


def calculate_probabilities(ctx: Optional[ActorContext], user_rank, specialty_id, region=None) -> list[dict]:
    """Per-hospital admission probability for ``specialty_id``, sorted for display.

    ``ctx`` is ``None`` for anonymous callers; signed-in searches are logged.
    """
    try:
        user_rank = int(user_rank)
    except (TypeError, ValueError):
        raise ValidationError({'userRank': 'La posición MIR debe ser un número entero'})
    if user_rank <= 0:
        raise ValidationError({'userRank': 'La posición MIR debe ser mayor que cero'})
    if not specialty_id:
        raise ValidationError({'specialtyId': 'La especialidad es obligatoria'})

    logger.info('MIR probabilities rank=%s specialty=%s region=%s', user_rank, specialty_id, region or 'all')
    _log_search(ctx, user_rank, specialty_id)

    hospitals = directory.get_hospitals()
    if region:
        hospitals = [h for h in hospitals if h.get('region') == region]
    hospital_ids = [h['id'] for h in hospitals if h.get('id')]
    if not hospital_ids:
        return []

    records: dict[str, list] = {}
    qs = HospitalSpecialtyGrade.objects.filter(specialty_id=specialty_id, hospital_id__in=hospital_ids)
    for record in qs.order_by('hospital_id', 'year'):
        records.setdefault(record.hospital_id, []).append(record)

    results = []
    years = mir_years()
    for hospital in hospitals:
        hospital_records = records.get(hospital.get('id'))
        if not hospital_records:
            # hospital does not offer the specialty
            continue
        series = cutoff_series(hospital_records, years)
        results.append({
            'hospital': hospital,
            'probability': estimate_probability(user_rank, series),
            'grades': [{'year': year, 'grade': series[year]} for year in years],
            'yearsUsed': sum(1 for v in series.values() if v is not None),
        })
    logger.info('MIR results calculated for %d hospitals', len(results))
    return sort_results(results)
