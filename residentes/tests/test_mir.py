import pytest
from rest_framework.exceptions import ValidationError

from residentes.models import Hospital, HospitalSpecialtyGrade, MirSimulatorSearch
from residentes.services.mir import (
    NA, calculate_probabilities, collation_key, cutoff_series, estimate_probability,
    normalize_cutoff, sort_results,
)


def result(name, probability):
    return {'hospital': {'name': name}, 'probability': probability}


def test_years_without_cutoff_are_excluded():
    assert estimate_probability(1600, {2025: 1500, 2024: None, 2023: 1800}) == '50%'


def test_no_valid_years_is_na_not_zero():
    assert estimate_probability(1, {2025: None, 2024: None}) == NA
    assert estimate_probability(1, {}) == NA


def test_rank_equal_to_cutoff_counts_as_admitted():
    assert estimate_probability(1500, {2025: 1500}) == '100%'
    assert estimate_probability(1501, {2025: 1500}) == '0%'


@pytest.mark.parametrize('matches,total,expected', [(1, 3, '33%'), (2, 3, '67%'), (1, 8, '13%'), (5, 7, '71%')])
def test_rounding(matches, total, expected):
    cutoffs = {year: (100 if year < matches else 10) for year in range(total)}
    assert estimate_probability(50, cutoffs) == expected


def test_normalize_cutoff():
    assert normalize_cutoff(1200) == 1200
    assert normalize_cutoff('1350') == 1350.0
    assert normalize_cutoff([900, '1100', None, 'x']) == 1100.0
    assert normalize_cutoff([]) is None
    assert normalize_cutoff('') is None
    assert normalize_cutoff(None) is None
    assert normalize_cutoff(True) is None


def test_cutoff_series_keeps_highest_per_year():
    records = [
        {'year': 2025, 'grades': 1000},
        {'year': 2025, 'grades': [1200, 800]},
        {'year': '2024', 'grades': None},
        {'year': 1999, 'grades': 5},
    ]
    series = cutoff_series(records, years=[2025, 2024, 2023])
    assert series == {2025: 1200, 2024: None, 2023: None}


def test_sort_results():
    results = [result('Zeta', NA), result('Beta', '40%'), result('Alfa', NA), result('Gamma', '80%')]
    ordered = sort_results(results)
    assert [(r['hospital']['name'], r['probability']) for r in ordered] == [
        ('Gamma', '80%'), ('Beta', '40%'), ('Alfa', NA), ('Zeta', NA),
    ]


def test_sort_ignores_accents_and_case():
    ordered = sort_results([result('hospital B', '50%'), result('Ávila', '50%')])
    assert [r['hospital']['name'] for r in ordered] == ['Ávila', 'hospital B']
    assert collation_key('Ávila') == 'avila'


@pytest.fixture
def grades(hospital, specialty):
    other = Hospital.objects.create(id='h-clinic', name='Hospital Clínic', city='Barcelona', region='Cataluña')
    empty = Hospital.objects.create(id='h-empty', name='Hospital Sin Datos', region='Cataluña')
    Hospital.objects.create(id='h-none', name='Hospital Sin Plazas', region='Cataluña')
    HospitalSpecialtyGrade.objects.create(hospital=hospital, specialty=specialty, year=2025, grades=1500)
    HospitalSpecialtyGrade.objects.create(hospital=hospital, specialty=specialty, year=2024, grades=None)
    HospitalSpecialtyGrade.objects.create(hospital=hospital, specialty=specialty, year=2023, grades=[1200, 1800])
    HospitalSpecialtyGrade.objects.create(hospital=other, specialty=specialty, year=2025, grades=3000)
    HospitalSpecialtyGrade.objects.create(hospital=empty, specialty=specialty, year=2025, grades=None)
    return hospital, other, empty


@pytest.mark.django_db
def test_calculate_probabilities(grades, specialty):
    results = calculate_probabilities(None, 1600, specialty.id)
    assert [(r['hospital']['id'], r['probability']) for r in results] == [
        ('h-clinic', '100%'), ('h-la-paz', '50%'), ('h-empty', NA),
    ]
    la_paz = results[1]
    assert la_paz['yearsUsed'] == 2
    assert la_paz['grades'][0] == {'year': 2025, 'grade': 1500}
    assert {'year': 2024, 'grade': None} in la_paz['grades']


@pytest.mark.django_db
def test_calculate_probabilities_region_filter(grades, specialty):
    results = calculate_probabilities(None, 1600, specialty.id, region='Comunidad de Madrid')
    assert [r['hospital']['id'] for r in results] == ['h-la-paz']


@pytest.mark.django_db
@pytest.mark.parametrize('rank', [0, -3, 'abc', None])
def test_calculate_probabilities_rejects_bad_rank(specialty, rank):
    with pytest.raises(ValidationError):
        calculate_probabilities(None, rank, specialty.id)


@pytest.mark.django_db
def test_signed_in_search_is_logged(ctx, grades, specialty):
    calculate_probabilities(ctx, 2000, specialty.id)
    search = MirSimulatorSearch.objects.get()
    assert search.user_id == ctx.user_id
    assert search.grade == 2000


@pytest.mark.django_db
def test_simulator_endpoint_anonymous(anon_client, grades, specialty):
    r = anon_client.post('/api/mir/simulate', {'userRank': 1600, 'specialtyId': specialty.id}, format='json')
    assert r.status_code == 200
    body = r.json()
    assert body['ok'] is True
    assert [x['probability'] for x in body['results']] == ['100%', '50%', NA]
    assert MirSimulatorSearch.objects.count() == 0


@pytest.mark.django_db
def test_simulator_endpoint_validates_rank(anon_client, specialty):
    r = anon_client.post('/api/mir/simulate', {'userRank': 0, 'specialtyId': specialty.id}, format='json')
    assert r.status_code == 400
    assert r.json()['ok'] is False
