import json
import os

from recout.models import Client, Employee, Product
from recout.repositories import ClientRepository, SnapshotStore


def read_bytes(path):
    with open(path, 'rb') as f:
        return f.read()


def test_fresh_store_has_seeded_admin_and_sectors(store, store_path):
    assert [e.username for e in store.employees] == ['admin']
    assert [s.name for s in store.sectors] == [
        'Triagem', 'Corte', 'Costura', 'Montagem Final', 'Bordado', 'Embalagem', 'Expedição',
    ]
    assert store.products == [] and store.clients == [] and store.production == []
    assert store.current_user is None
    assert not os.path.exists(store_path)


def test_save_load_round_trip_is_byte_stable(store, store_path):
    store.products.append(Product(1, 'Calça', '1001', 'Cliente A', 'Corte'))
    store.clients.append(Client(2, 'Cliente A', '12.345.678/0001-90', '(11) 9999-0000', 'a@x.com', 'Rua 1'))
    store.current_user = store.employees[0]
    assert store.save()
    first = read_bytes(store_path)

    for _ in range(3):
        reloaded = SnapshotStore(store_path)
        assert reloaded.save()
        assert read_bytes(store_path) == first


def test_snapshot_schema_keys(store, store_path):
    store.save()
    with open(store_path, encoding='utf-8') as f:
        data = json.load(f)
    assert set(data) == {'employees', 'products', 'clients', 'production', 'sectors', 'currentUser'}
    assert data['currentUser'] is None
    assert data['employees'][0]['dailyProductionBase'] == 0


def test_invalid_json_keeps_defaults_and_logs(store_path, caplog):
    with open(store_path, 'w', encoding='utf-8') as f:
        f.write('{not json')

    store = SnapshotStore(store_path, autoload=False)
    with caplog.at_level('ERROR'):
        assert store.load() is False
    assert [e.username for e in store.employees] == ['admin']
    assert 'Error al cargar' in caplog.text


def test_malformed_key_only_affects_that_collection(store_path):
    with open(store_path, 'w', encoding='utf-8') as f:
        json.dump({
            'employees': 'oops',
            'products': [{'id': 7, 'name': 'Bolsa', 'code': '1007', 'client': 'C', 'sector': 'Corte'}],
            'clients': [{'no_id': True}],
        }, f)

    store = SnapshotStore(store_path)
    assert [e.username for e in store.employees] == ['admin']
    assert [p.code for p in store.products] == ['1007']
    assert store.clients == []
    assert len(store.sectors) == 7

    store.save()
    with open(store_path, encoding='utf-8') as f:
        assert json.load(f)['clients'] == [{'no_id': True}]


def test_load_keeps_in_memory_state_for_missing_file(store):
    store.clients.append(Client(1, 'Só em memória'))
    assert store.load() is False
    assert [c.name for c in store.clients] == ['Só em memória']


def test_null_current_user_does_not_clear_pointer(store, store_path):
    store.save()
    store.current_user = Employee(id=1, name='Administrador')
    store.load()
    assert store.current_user is not None


def test_save_failure_is_absorbed(tmp_path, caplog):
    blocker = tmp_path / 'not_a_dir'
    blocker.write_text('x')
    store = SnapshotStore(str(blocker / 'recout_system.json'))

    with caplog.at_level('ERROR'):
        assert store.save() is False
    assert 'Error al guardar' in caplog.text


def test_bad_ledger_record_does_not_erase_the_ledger(store_path, caplog):
    good = {
        'id': '1001', 'employeeName': 'Carlos', 'partName': 'Peça', 'partCode': '1001',
        'currentSector': 'Corte', 'startTime': 1000, 'status': 'finished',
    }
    other = dict(good, id='1003', partCode='1003')
    cancelled = dict(good, id='1002', partCode='1002', status='cancelled')
    with open(store_path, 'w', encoding='utf-8') as f:
        json.dump({'production': [good, cancelled, other]}, f)

    with caplog.at_level('ERROR'):
        ClientRepository(SnapshotStore(store_path)).add(Client(1, 'Cliente'))

    with open(store_path, encoding='utf-8') as f:
        data = json.load(f)
    assert [r['id'] for r in data['production']] == ['1001', '1003', '1002']
    assert data['production'][2] == cancelled
    assert [c['name'] for c in data['clients']] == ['Cliente']
    assert 'Registro inválido' in caplog.text
    assert [e.id for e in SnapshotStore(store_path).production] == ['1001', '1003']
