import pytest

from residentes.models import AuditEvent, LibroEntry, LibroEvent, LibroNode, User

pytestmark = pytest.mark.django_db

SECTION = 'guardias'


def create_node(client, name, parent=None, **extra):
    payload = {'section': SECTION, 'name': name, 'parentId': parent, **extra}
    r = client.post('/api/libro/nodes', payload, format='json')
    assert r.status_code == 201, r.content
    return r.json()['data']


def add_entry(client, node_id, count):
    r = client.post('/api/libro/entries', {'nodeId': node_id, 'section': SECTION, 'count': count}, format='json')
    assert r.status_code == 201, r.content
    return r.json()['data']


def test_requires_authentication(anon_client):
    r = anon_client.get('/api/libro/tree', {'section': SECTION})
    assert r.status_code in (401, 403)
    assert r.json()['ok'] is False


def test_tree_totals(client):
    a = create_node(client, 'Urgencias')
    b = create_node(client, 'Suturas', a['id'])
    c = create_node(client, 'Drenajes', a['id'])
    for count in (1, 1, -1):
        add_entry(client, b['id'], count)
    add_entry(client, c['id'], 1)
    # direct entries on a category with children do not count
    add_entry(client, a['id'], 5)

    r = client.get('/api/libro/tree', {'section': SECTION})
    assert r.status_code == 200
    data = r.json()['data']
    (root,) = data['tree']
    assert root['name'] == 'Urgencias'
    assert root['total_count'] == 2
    assert [(ch['name'], ch['total_count']) for ch in root['children']] == [('Suturas', 1), ('Drenajes', 1)]
    assert data['statistics']['totalNodes'] == 3
    assert data['statistics']['totalCount'] == 2


def test_section_data_is_flat_and_scoped(client):
    create_node(client, 'Mía')
    other = User.objects.create_user(username='luis', password='x')
    LibroNode.objects.create(user=other, section=SECTION, name='Ajena')
    LibroNode.objects.create(user=other, section='otra', name='Otra sección')

    data = client.get('/api/libro/section', {'section': SECTION}).json()['data']
    assert [n['name'] for n in data['nodes']] == ['Mía']
    assert data['entries'] == [] and data['events'] == []


def test_new_siblings_are_appended(client):
    first = create_node(client, 'Primero')
    second = create_node(client, 'Segundo')
    assert (first['position'], second['position']) == (0, 1)


def test_cannot_attach_to_someone_elses_node(client):
    other = User.objects.create_user(username='luis', password='x')
    foreign = LibroNode.objects.create(user=other, section=SECTION, name='Ajena')
    r = client.post('/api/libro/nodes', {'section': SECTION, 'name': 'x', 'parentId': foreign.id}, format='json')
    assert r.status_code == 404
    assert r.json()['error']['code'] == 'not_found'


def test_blank_name_rejected(client):
    r = client.post('/api/libro/nodes', {'section': SECTION, 'name': '<b></b>  '}, format='json')
    assert r.status_code == 400


def test_rename_keeps_goal_unless_given(client):
    node = create_node(client, 'Vías', goal='20')
    r = client.patch(f"/api/libro/nodes/{node['id']}", {'name': 'Vías centrales'}, format='json')
    assert r.json()['data']['goal'] == '20'
    r = client.put(f"/api/libro/nodes/{node['id']}", {'name': 'Vías centrales', 'goal': None}, format='json')
    assert r.json()['data']['goal'] is None


def test_delete_node_cascades(client):
    a = create_node(client, 'A')
    b = create_node(client, 'B', a['id'])
    c = create_node(client, 'C', b['id'])
    keep = create_node(client, 'Otro')
    add_entry(client, c['id'], 2)
    add_entry(client, keep['id'], 1)
    r = client.post('/api/libro/events', {'nodeId': b['id'], 'section': SECTION, 'eventDate': '2025-03-01'},
                    format='json')
    assert r.status_code == 201

    r = client.delete(f"/api/libro/nodes/{a['id']}")
    assert r.status_code == 200
    assert r.json()['deleted'] == {'nodes': 3, 'entries': 2, 'events': 1}

    assert list(LibroNode.objects.values_list('name', flat=True)) == ['Otro']
    assert LibroEntry.objects.count() == 1
    assert LibroEvent.objects.count() == 0
    assert AuditEvent.objects.filter(action='libro_node_delete').count() == 1


def test_event_is_backed_by_single_entry(client):
    node = create_node(client, 'Congresos')
    r = client.post('/api/libro/events', {
        'nodeId': node['id'], 'section': SECTION, 'eventDate': '2025-05-10',
        'title': 'SEMES', 'location': 'Sevilla',
    }, format='json')
    event = r.json()['data']
    entry = LibroEntry.objects.get(id=event['entry_id'])
    assert entry.count == 1

    tree = client.get('/api/libro/tree', {'section': SECTION}).json()['data']['tree']
    assert tree[0]['total_count'] == 1

    r = client.put(f"/api/libro/events/{event['id']}", {'eventDate': '2025-05-11', 'title': 'SEMES 2025'},
                   format='json')
    assert r.json()['data']['event_date'] == '2025-05-11'

    r = client.delete(f"/api/libro/events/{event['id']}")
    assert r.status_code == 200
    assert LibroEvent.objects.count() == 0
    assert LibroEntry.objects.count() == 0


def test_reorder_roots(client):
    a, b, c = (create_node(client, n) for n in 'ABC')
    r = client.post('/api/libro/nodes/reorder', {
        'section': SECTION, 'parentId': None, 'orderedIds': [c['id'], a['id'], b['id']],
    }, format='json')
    assert r.status_code == 200
    nodes = client.get('/api/libro/section', {'section': SECTION}).json()['data']['nodes']
    assert [(n['name'], n['position']) for n in nodes] == [('C', 0), ('A', 1), ('B', 2)]


def test_reorder_rejects_partial_list(client):
    a, b = create_node(client, 'A'), create_node(client, 'B')
    r = client.post('/api/libro/nodes/reorder', {'section': SECTION, 'orderedIds': [b['id']]}, format='json')
    assert r.status_code == 400
    assert LibroNode.objects.get(id=a['id']).position == 0


def test_move_node(client):
    parent = create_node(client, 'P')
    x = create_node(client, 'x', parent['id'])
    y = create_node(client, 'y', parent['id'])
    r = client.post(f"/api/libro/nodes/{y['id']}/move", {'direction': 'up'}, format='json')
    assert r.json()['data'] == [{'id': y['id'], 'position': 0}, {'id': x['id'], 'position': 1}]
    # already first
    r = client.post(f"/api/libro/nodes/{y['id']}/move", {'direction': 'up'}, format='json')
    assert r.json()['data'][0]['id'] == y['id']


def test_template(client):
    r = client.post('/api/libro/template', {'section': SECTION}, format='json')
    assert r.status_code == 201
    assert r.json()['data']['created'] == LibroNode.objects.count() == 15
    assert LibroNode.objects.filter(parent__isnull=True).count() == 4

    r = client.post('/api/libro/template', {'section': SECTION}, format='json')
    assert r.status_code == 409
    assert r.json()['ok'] is False
