"""
Pytest configuration and shared fixtures.
Firestore and the Identity Toolkit are replaced with in-memory doubles.
"""

import itertools
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest
import requests
from google.api_core import exceptions as google_exceptions
from firebase_admin import firestore

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from firebase_facades import FacadeLogger, FirebaseAuth, FirebaseClient, FirebaseConfig, FirebaseDataLayer


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = None if data is None else dict(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return None if self._data is None else dict(self._data)


class FakeWatch:
    def __init__(self, listeners, entry):
        self._listeners = listeners
        self._entry = entry
        self.unsubscribe_calls = 0

    def unsubscribe(self):
        self.unsubscribe_calls += 1
        if self._entry in self._listeners:
            self._listeners.remove(self._entry)


class FakeQuery:
    def __init__(self, db, collection, filters=(), order=None, limit_count=None):
        self.db = db
        self.collection_name = collection
        self.filters = list(filters)
        self.order = order
        self.limit_count = limit_count

    def where(self, filter):
        return FakeQuery(self.db, self.collection_name, self.filters + [filter], self.order, self.limit_count)

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        return FakeQuery(self.db, self.collection_name, self.filters, (field, direction), self.limit_count)

    def limit(self, count):
        return FakeQuery(self.db, self.collection_name, self.filters, self.order, count)

    def stream(self):
        docs = [FakeSnapshot(doc_id, data) for doc_id, data in self.db.collection_data(self.collection_name).items()]
        for f in self.filters:
            assert f.op_string == '=='
            docs = [d for d in docs if d.to_dict().get(f.field_path) == f.value]
        if self.order:
            field, direction = self.order
            docs = [d for d in docs if field in d.to_dict()]
            docs.sort(key=lambda d: d.to_dict()[field], reverse=direction == firestore.Query.DESCENDING)
        if self.limit_count is not None:
            docs = docs[:self.limit_count]
        return iter(docs)

    def on_snapshot(self, callback):
        entry = ('query', self, callback)
        self.db.listeners.append(entry)
        callback(list(self.stream()), [], None)
        return FakeWatch(self.db.listeners, entry)


class FakeCollection(FakeQuery):
    def document(self, doc_id=None):
        return FakeDocumentRef(self.db, self.collection_name, doc_id or uuid.uuid4().hex[:20])

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self.db.now(), ref


class FakeDocumentRef:
    def __init__(self, db, collection, doc_id):
        self.db = db
        self.collection_name = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self.db.collection_data(self.collection_name).get(self.id))

    def set(self, data, merge=False):
        store = self.db.collection_data(self.collection_name)
        resolved = self.db.resolve(data)
        if merge and self.id in store:
            store[self.id].update(resolved)
        else:
            store[self.id] = resolved
        self.db.notify(self.collection_name)

    def update(self, data):
        store = self.db.collection_data(self.collection_name)
        if self.id not in store:
            raise google_exceptions.NotFound(f"No document to update: {self.collection_name}/{self.id}")
        store[self.id].update(self.db.resolve(data))
        self.db.notify(self.collection_name)

    def delete(self):
        self.db.collection_data(self.collection_name).pop(self.id, None)
        self.db.notify(self.collection_name)

    def on_snapshot(self, callback):
        entry = ('document', self, callback)
        self.db.listeners.append(entry)
        callback([self.get()], [], None)
        return FakeWatch(self.db.listeners, entry)


class FakeFirestore:
    """Synchronous stand-in for the Firestore client; listeners fire on every write."""

    def __init__(self):
        self.collections = {}
        self.listeners = []
        self._clock = itertools.count(1)
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def collection(self, name):
        return FakeCollection(self, name)

    def collection_data(self, name):
        return self.collections.setdefault(name, {})

    def now(self):
        return self._epoch + timedelta(seconds=next(self._clock))

    def resolve(self, data):
        return {k: self.now() if v is firestore.SERVER_TIMESTAMP else v for k, v in data.items()}

    def notify(self, collection):
        for kind, target, callback in list(self.listeners):
            if target.collection_name != collection:
                continue
            if kind == 'query':
                callback(list(target.stream()), [], None)
            else:
                callback([target.get()], [], None)


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Answers Identity Toolkit calls from a table keyed by endpoint."""

    def __init__(self):
        self.responses = {}
        self.calls = []

    def respond(self, endpoint, payload, status_code=200):
        self.responses[endpoint] = FakeResponse(status_code, payload)

    def fail(self, endpoint, message, status_code=400):
        self.respond(endpoint, {'error': {'code': status_code, 'message': message}}, status_code)

    def post(self, url, json=None, data=None, timeout=None):
        self.calls.append(SimpleNamespace(url=url, json=json, data=data, timeout=timeout))
        for endpoint, response in self.responses.items():
            if endpoint in url:
                return response
        raise requests.ConnectionError(f"No route to {url}")

    def close(self):
        pass


USERS = {
    'uid-alice': SimpleNamespace(uid='uid-alice', email='alice@example.com', display_name='Alice'),
    'uid-bob': SimpleNamespace(uid='uid-bob', email='bob@gmail.com', display_name='Bob'),
}


def token_payload(uid, suffix='1'):
    return {
        'localId': uid,
        'email': USERS[uid].email,
        'idToken': f"id-token-{suffix}",
        'refreshToken': f"refresh-token-{suffix}",
    }


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def config():
    return FirebaseConfig(
        service_account={'project_id': 'demo-project'},
        api_key='test-api-key',
        project_id='demo-project',
        auth_domain='demo-project.firebaseapp.com',
    )


@pytest.fixture
def client(config, fake_db, fake_session):
    return FirebaseClient(config, db=fake_db, session=fake_session, app=object())


@pytest.fixture
def admin_users(monkeypatch):
    """Serve Admin SDK user lookups from USERS."""
    def get_user(uid, app=None):
        return USERS[uid]
    monkeypatch.setattr('firebase_facades.identity.auth.get_user', get_user)
    return USERS


@pytest.fixture
def data_layer(client):
    return FirebaseDataLayer(client, logger=FacadeLogger('firebase_facades.tests'))


@pytest.fixture
def firebase_auth(client, admin_users):
    return FirebaseAuth(client, logger=FacadeLogger('firebase_facades.tests'))
