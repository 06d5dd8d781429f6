from __future__ import annotations

import threading
from pathlib import Path

import pytest

from ai_log_inspector.errors import InvalidDocumentError, VectorStoreError
from ai_log_inspector.models import VectorDocument
from ai_log_inspector.storage.vector_store import InMemoryVectorStore, PersistentVectorStore


def _doc(doc_id: str, vector: tuple[float, ...], **metadata) -> VectorDocument:
    return VectorDocument(id=doc_id, vector=vector, metadata={"content": doc_id, **metadata})


def test_query_ranks_by_cosine_similarity() -> None:
    store = InMemoryVectorStore()
    store.save([_doc("x", (1.0, 0.0)), _doc("y", (0.0, 1.0)), _doc("xy", (1.0, 1.0))])

    results = store.query((1.0, 0.1), max_items=3)

    assert [doc.id for doc in results] == ["x", "xy", "y"]
    assert results[0].score == pytest.approx(0.995, abs=1e-3)
    assert results[0].score >= results[1].score >= results[2].score


def test_query_respects_max_items() -> None:
    store = InMemoryVectorStore()
    store.save([_doc(str(i), (1.0, float(i))) for i in range(10)])

    assert len(store.query((1.0, 0.0), max_items=4)) == 4


def test_query_is_deterministic_with_ties() -> None:
    store = InMemoryVectorStore()
    store.save([_doc(name, (1.0, 0.0)) for name in ("first", "second", "third")])

    runs = [[doc.id for doc in store.query((1.0, 0.0), max_items=3)] for _ in range(5)]

    assert runs == [["first", "second", "third"]] * 5


def test_store_does_not_filter_low_scores() -> None:
    store = InMemoryVectorStore()
    store.save([_doc("opposite", (-1.0, 0.0))])

    results = store.query((1.0, 0.0), max_items=5)

    assert [doc.id for doc in results] == ["opposite"]
    assert results[0].score < 0


def test_empty_store_returns_no_results() -> None:
    assert InMemoryVectorStore().query((1.0, 0.0)) == []


def test_save_empty_is_noop() -> None:
    store = InMemoryVectorStore()
    store.save([])

    assert store.count == 0
    assert store.dimension is None


@pytest.mark.parametrize(
    "bad",
    [
        {"id": "not a document"},
        VectorDocument(id="", vector=(1.0, 0.0)),
        VectorDocument(id="empty", vector=()),
        VectorDocument(id="wrong-dim", vector=(1.0, 0.0, 0.0)),
    ],
)
def test_save_rejects_malformed_documents(bad) -> None:
    store = InMemoryVectorStore()

    with pytest.raises(InvalidDocumentError):
        store.save([_doc("good", (1.0, 0.0)), bad])

    assert store.count == 0


def test_save_rejects_dimension_change_across_batches() -> None:
    store = InMemoryVectorStore()
    store.save([_doc("a", (1.0, 0.0))])

    with pytest.raises(InvalidDocumentError):
        store.save([_doc("b", (1.0, 0.0, 0.0))])
    assert store.count == 1


def test_query_dimension_mismatch_raises() -> None:
    store = InMemoryVectorStore()
    store.save([_doc("a", (1.0, 0.0))])

    with pytest.raises(VectorStoreError):
        store.query((1.0, 0.0, 0.0))


def test_stores_are_isolated() -> None:
    first = InMemoryVectorStore()
    second = InMemoryVectorStore()

    first.save([_doc("only-in-first", (1.0, 0.0))])

    assert second.query((1.0, 0.0)) == []
    assert second.scan() == []


def test_results_are_copies() -> None:
    store = InMemoryVectorStore()
    store.save([_doc("a", (1.0, 0.0), level="ERROR")])

    result = store.query((1.0, 0.0))[0]
    result.metadata["level"] = "tampered"  # type: ignore[index]

    assert store.query((1.0, 0.0))[0].metadata["level"] == "ERROR"


def test_scan_returns_unscored_documents_in_insertion_order() -> None:
    store = InMemoryVectorStore()
    store.save([_doc(str(i), (1.0, float(i))) for i in range(5)])

    scanned = store.scan(limit=3)

    assert [doc.id for doc in scanned] == ["0", "1", "2"]
    assert all(doc.score is None for doc in scanned)


def test_concurrent_saves_and_queries() -> None:
    store = InMemoryVectorStore()
    store.save([_doc("seed", (1.0, 0.0))])
    errors: list[Exception] = []

    def writer(worker: int) -> None:
        try:
            for i in range(25):
                store.save([_doc(f"{worker}-{i}", (1.0, float(i)))])
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    def reader() -> None:
        try:
            for _ in range(50):
                results = store.query((1.0, 0.0), max_items=5)
                assert results
                assert store.dimension == 2
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert store.count == 1 + 4 * 25


def test_persistent_store_round_trip(tmp_path: Path) -> None:
    store = PersistentVectorStore(tmp_path / "store")
    store.save([_doc("a", (1.0, 0.0), level="ERROR"), _doc("b", (0.0, 1.0))])

    reloaded = PersistentVectorStore(tmp_path / "store")

    assert reloaded.count == 2
    assert reloaded.dimension == 2
    top = reloaded.query((1.0, 0.0), max_items=1)[0]
    assert top.id == "a"
    assert top.metadata["level"] == "ERROR"


def test_persistent_store_starts_empty(tmp_path: Path) -> None:
    store = PersistentVectorStore(tmp_path / "fresh")

    assert store.count == 0
    assert (tmp_path / "fresh").is_dir()
