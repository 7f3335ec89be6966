# carbon_api/store.py
import json, os, tempfile, threading, uuid


def load_json(path):
    """Load a JSON file, returning Python objects."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)

def save_json(path, data):
    """Persist Python objects to a JSON file (ensures parent directory)."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False) as f:
        json.dump(data, f, indent=2)
    os.replace(f.name, path)


class JsonDocumentStore:
    """
    Minimal document store backed by one JSON file:
      { "<collection>": { "<doc_id>": { ...document... } } }

    Supports get / put / query / delete. Each call re-reads the file and
    replaces it atomically, so readers never see a partial write. The lock
    only serialises writers within one process; concurrent writers in
    separate processes can still overwrite each other's updates.
    """

    def __init__(self, path):
        self.path = path
        self._lock = threading.Lock()

    def _read(self):
        try:
            return load_json(self.path)
        except FileNotFoundError:
            return {}

    def put(self, collection, document, doc_id=None):
        """Insert or replace a document; returns its id."""
        doc_id = doc_id or uuid.uuid4().hex
        with self._lock:
            data = self._read()
            docs = data.setdefault(collection, {})
            # Replacing moves the document to the end of the insertion order
            docs.pop(doc_id, None)
            docs[doc_id] = dict(document)
            save_json(self.path, data)
        return doc_id

    def get(self, collection, doc_id):
        with self._lock:
            doc = self._read().get(collection, {}).get(doc_id)
        return dict(doc) if doc is not None else None

    def delete(self, collection, doc_id):
        """Remove a document. Returns False if it did not exist."""
        with self._lock:
            data = self._read()
            docs = data.get(collection, {})
            if doc_id not in docs:
                return False
            del docs[doc_id]
            save_json(self.path, data)
        return True

    def query(self, collection, where=None, order_by=None, descending=False, limit=None, offset=0):
        """
        Return [(doc_id, document)] matching every field == value in `where`.
        With `order_by`, documents lacking the field sort first ascending.
        Equal keys keep insertion order, newest first when descending.
        """
        with self._lock:
            docs = list(self._read().get(collection, {}).items())

        if where:
            docs = [(i, d) for i, d in docs if all(d.get(k) == v for k, v in where.items())]

        if order_by:
            def sort_key(item):
                value = item[1].get(order_by)
                return (value is not None, value if value is not None else '')
            if descending:
                docs = sorted(reversed(docs), key=sort_key, reverse=True)
            else:
                docs = sorted(docs, key=sort_key)

        offset = int(offset or 0)
        docs = docs[offset:]
        if limit is not None:
            docs = docs[:int(limit)]
        return [(i, dict(d)) for i, d in docs]
