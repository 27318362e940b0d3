from app.core.search import keyword_search, query_terms


def _row(text, doc="d1", idx=0, filename="bio.txt"):
    return {"text": text, "document_id": doc, "chunk_index": idx, "filename": filename}


CHUNKS = [
    _row("Mitochondria produce ATP for the cell.", idx=0),
    _row("The cell membrane controls transport.", idx=1),
    _row("Photosynthesis happens in chloroplasts.", idx=2),
    _row("ATP synthase sits in the mitochondria membrane.", doc="d2", idx=0, filename="chem.txt"),
]


def test_query_terms_drop_short_words():
    assert query_terms("What is ATP in a cell?") == ["what", "atp", "cell?"]
    assert query_terms("") == []


def test_no_usable_terms():
    assert keyword_search(CHUNKS, "is a of") == []


def test_ranks_by_fraction_of_terms():
    hits = keyword_search(CHUNKS, "mitochondria membrane")
    assert [(h.document_id, h.chunk_index) for h in hits] == [("d2", 0), ("d1", 0), ("d1", 1)]
    assert hits[0].score == 1.0
    assert hits[1].score == 0.5


def test_case_insensitive_and_no_match():
    assert keyword_search(CHUNKS, "CHLOROPLASTS")[0].chunk_index == 2
    assert keyword_search(CHUNKS, "quantum entanglement") == []


def test_limit():
    assert len(keyword_search(CHUNKS, "the cell atp membrane", limit=2)) == 2
