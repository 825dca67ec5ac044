"""Firestore data layer abstraction."""

from typing import Any, Callable, Dict, List, Optional

from firebase_admin import firestore

from .client import FirebaseClient
from .logger import FacadeLogger
from .result import NOT_FOUND, Result, returns_result
from .subscription import Subscription

CREATED_AT = 'createdAt'
UPDATED_AT = 'updatedAt'

SORT_DIRECTIONS = {
    'asc': firestore.Query.ASCENDING,
    'desc': firestore.Query.DESCENDING,
}


class FirebaseDataLayer:
    """CRUD, queries and real-time listeners over Firestore collections."""

    def __init__(self, client: FirebaseClient, logger: Optional[FacadeLogger] = None):
        self.client = client
        self.logger = logger or FacadeLogger()

    @property
    def db(self):
        return self.client.db

    @staticmethod
    def _record(doc) -> Dict[str, Any]:
        """Merge a snapshot's id with its fields."""
        return {'id': doc.id, **(doc.to_dict() or {})}

    @staticmethod
    def _stamped(payload: Dict, field: str) -> Dict:
        # Copy so the caller's dict is left alone
        data = dict(payload)
        data[field] = firestore.SERVER_TIMESTAMP
        return data

    # Writes
    @returns_result("Add document")
    def add_document(self, collection: str, payload: Dict) -> Result[Dict]:
        """Add a document with a generated id and a server creation timestamp."""
        _, doc_ref = self.db.collection(collection).add(self._stamped(payload, CREATED_AT))
        return Result.ok({'id': doc_ref.id})

    @returns_result("Set document")
    def set_document(self, collection: str, document_id: str, payload: Dict) -> Result[None]:
        """Create or fully replace the document at ``document_id``."""
        self.db.collection(collection).document(document_id).set(self._stamped(payload, UPDATED_AT))
        return Result.ok()

    @returns_result("Update document")
    def update_document(self, collection: str, document_id: str, updates: Dict) -> Result[None]:
        """
        Merge ``updates`` into an existing document.
        Fields not named in ``updates`` are kept. Fails if the document is missing.
        """
        self.db.collection(collection).document(document_id).update(self._stamped(updates, UPDATED_AT))
        return Result.ok()

    @returns_result("Delete document")
    def delete_document(self, collection: str, document_id: str) -> Result[None]:
        """Delete a document. Deleting a missing document is not an error."""
        self.db.collection(collection).document(document_id).delete()
        return Result.ok()

    # Reads
    @returns_result("Get document")
    def get_document(self, collection: str, document_id: str) -> Result[Dict]:
        """Load a single document."""
        doc = self.db.collection(collection).document(document_id).get()
        if not doc.exists:
            return Result.fail(NOT_FOUND)
        return Result.ok(self._record(doc))

    @returns_result("Get all documents")
    def get_all_documents(self, collection: str) -> Result[List[Dict]]:
        """Load every document in a collection."""
        records = [self._record(doc) for doc in self.db.collection(collection).stream()]
        return Result.ok(records)

    @returns_result("Query documents")
    def query_documents(self, collection: str, filter_field: str, filter_value: Any,
                        sort_field: Optional[str] = None, sort_direction: str = 'desc',
                        limit_count: Optional[int] = None) -> Result[List[Dict]]:
        """Equality filter with optional ordering and limit."""
        if sort_direction not in SORT_DIRECTIONS:
            return Result.fail(f"Invalid sort direction: {sort_direction}")

        query = self.db.collection(collection).where(
            filter=firestore.FieldFilter(filter_field, '==', filter_value)
        )
        if sort_field:
            query = query.order_by(sort_field, direction=SORT_DIRECTIONS[sort_direction])
        if limit_count is not None:
            query = query.limit(limit_count)

        records = [self._record(doc) for doc in query.stream()]
        return Result.ok(records)

    # Real-time listeners
    def watch_collection(self, collection: str,
                         callback: Optional[Callable[[List[Dict]], None]] = None) -> Subscription:
        """
        Listen to a whole collection, newest first.

        Every change delivers the full current result set, starting with the
        initial snapshot.
        """
        subscription = Subscription(callback, name=f"collection {collection}")

        def on_snapshot(docs, changes, read_time):
            records = [self._record(doc) for doc in docs]
            self.logger.log_snapshot(collection, len(records))
            subscription.deliver(records)

        def query():
            return self.db.collection(collection).order_by(CREATED_AT, direction=firestore.Query.DESCENDING)
        return self._listen(query, on_snapshot, subscription)

    def watch_document(self, collection: str, document_id: str,
                       callback: Optional[Callable[[Optional[Dict]], None]] = None) -> Subscription:
        """Listen to one document. ``None`` is delivered while it does not exist."""
        subscription = Subscription(callback, name=f"document {collection}/{document_id}")

        def on_snapshot(docs, changes, read_time):
            record = None
            for doc in docs:
                if doc.exists:
                    record = self._record(doc)
            self.logger.log_snapshot(f"{collection}/{document_id}", 1 if record else 0)
            subscription.deliver(record)

        def doc_ref():
            return self.db.collection(collection).document(document_id)
        return self._listen(doc_ref, on_snapshot, subscription)

    def _listen(self, target, on_snapshot, subscription: Subscription) -> Subscription:
        try:
            watch = target().on_snapshot(on_snapshot)
        except Exception as e:
            # Client setup or registration failed; hand back a closed subscription carrying the error
            self.logger.log_failure(f"Watch {subscription.name}", e)
            subscription.error = e
            subscription.cancel()
            return subscription
        subscription.attach(watch.unsubscribe)
        return subscription
