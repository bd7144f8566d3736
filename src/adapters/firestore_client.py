"""Firestore database client."""

from typing import Any

from google.cloud import firestore  # type: ignore[attr-defined]
from google.cloud.firestore_v1.base_query import FieldFilter


class FirestoreClient:
    """Client for Firestore CRUD operations.

    Automatically connects to emulator when FIRESTORE_EMULATOR_HOST is set.
    """

    def __init__(self, project_id: str) -> None:
        """Initialize Firestore client.

        Args:
            project_id: GCP project ID.
        """
        self._db = firestore.Client(project=project_id)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Get a document by ID.

        Args:
            collection: Collection name.
            doc_id: Document ID.

        Returns:
            Document data or None if not found.
        """
        doc = self._db.collection(collection).document(doc_id).get()
        if doc.exists:
            return doc.to_dict()
        return None

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            data: Document data.
        """
        self._db.collection(collection).document(doc_id).set(data)

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document.

        Args:
            collection: Collection name.
            doc_id: Document ID.
        """
        self._db.collection(collection).document(doc_id).delete()

    def query(
        self, collection: str, filters: list[tuple[str, str, Any]]
    ) -> list[dict[str, Any]]:
        """Query documents with filters.

        Args:
            collection: Collection name.
            filters: List of (field, operator, value) tuples.

        Returns:
            List of matching documents.
        """
        query = self._db.collection(collection)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, value))

        return [doc.to_dict() for doc in query.stream()]

    def query_ordered(
        self,
        collection: str,
        order_by: str,
        limit: int,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        """Fetch documents sorted by a field, capped at ``limit``.

        Args:
            collection: Collection name.
            order_by: Field to sort on.
            limit: Maximum number of documents.
            descending: Sort direction.

        Returns:
            List of documents in sort order.
        """
        direction = (
            firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
        )
        query = (
            self._db.collection(collection)
            .order_by(order_by, direction=direction)
            .limit(limit)
        )
        return [doc.to_dict() for doc in query.stream()]

    def append_to_array(
        self,
        collection: str,
        doc_id: str,
        field: str,
        value: Any,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Append a value to an array field inside a transaction.

        Creates the document when missing. Concurrent appends are retried by
        Firestore, so none of them are lost.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            field: Array field name.
            value: Value to append.
            extra: Other fields to merge into the document.
        """
        ref = self._db.collection(collection).document(doc_id)
        append = firestore.transactional(_append_in_transaction)
        append(self._db.transaction(), ref, field, value, extra or {})

    def pop_array(self, collection: str, doc_id: str, field: str) -> list[Any]:
        """Read an array field and delete its document in one transaction.

        Args:
            collection: Collection name.
            doc_id: Document ID.
            field: Array field name.

        Returns:
            The array values, or an empty list if the document is missing.
        """
        ref = self._db.collection(collection).document(doc_id)
        pop = firestore.transactional(_pop_in_transaction)
        return pop(self._db.transaction(), ref, field)


def _append_in_transaction(
    transaction: Any,
    ref: Any,
    field: str,
    value: Any,
    extra: dict[str, Any],
) -> None:
    snapshot = ref.get(transaction=transaction)
    data = (snapshot.to_dict() or {}) if snapshot.exists else {}
    values = list(data.get(field, []))
    values.append(value)
    transaction.set(ref, {**extra, field: values}, merge=True)


def _pop_in_transaction(transaction: Any, ref: Any, field: str) -> list[Any]:
    snapshot = ref.get(transaction=transaction)
    if not snapshot.exists:
        return []
    values = list((snapshot.to_dict() or {}).get(field, []))
    transaction.delete(ref)
    return values
