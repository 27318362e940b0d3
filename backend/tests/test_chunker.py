import pytest

from app.core.chunker import Chunk, ChunkingConfigError, chunk_text, split_sentences


def _lecture(n=40):
    return " ".join(f"Sentence number {i} is about photosynthesis." for i in range(n))


def test_empty_text_gives_no_chunks():
    assert chunk_text("", 1000, 200) == []


def test_whitespace_only_gives_no_chunks():
    assert chunk_text("   \n\t  ", 1000, 200) == []


def test_single_short_sentence_is_one_chunk():
    chunks = chunk_text("  Hello world.  ", 1000, 200)
    assert len(chunks) == 1
    assert chunks[0].text == "Hello world."
    assert chunks[0].chunk_index == 0
    assert chunks[0].start_index == 0


def test_long_sentence_is_never_split():
    text = "x" * 2000
    chunks = chunk_text(text, 1000, 200)
    assert len(chunks) == 1
    assert chunks[0].text == text
    assert chunks[0].end_index == 2000


def test_small_window_scenario():
    chunks = chunk_text("A. B. C. D.", chunk_size=5, overlap=2)
    assert [c.text for c in chunks] == ["A. B.", "B. C.", "C. D."]
    assert [c.chunk_index for c in chunks] == [0, 1, 2]
    assert [c.start_index for c in chunks] == [0, 1, 2]
    assert [c.end_index for c in chunks] == [5, 6, 7]
    for prev, nxt in zip(chunks, chunks[1:]):
        assert nxt.text.startswith(prev.text[-2:])


def test_oversized_sentence_between_short_ones():
    long_sentence = "y" * 2000 + "."
    chunks = chunk_text(f"Short one. {long_sentence} Tail.", chunk_size=100, overlap=10)
    assert [c.chunk_index for c in chunks] == [0, 1, 2]
    assert chunks[0] == Chunk(text="Short one.", start_index=0, end_index=10, chunk_index=0)
    assert chunks[1].text == f"Short one. {long_sentence}"
    assert (chunks[1].start_index, chunks[1].end_index) == (1, 2013)
    assert chunks[2] == Chunk(text="yyyyyyyyy. Tail.", start_index=2, end_index=18, chunk_index=2)


def test_zero_overlap_carries_nothing_over():
    chunks = chunk_text("A. B. C.", chunk_size=5, overlap=0)
    assert [c.text for c in chunks] == ["A. B.", "C."]
    assert chunks[1].start_index == 1


def test_indices_are_contiguous_and_texts_non_empty():
    chunks = chunk_text(_lecture(), chunk_size=200, overlap=40)
    assert len(chunks) > 1
    assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
    assert all(c.text.strip() for c in chunks)


def test_adjacent_chunks_overlap():
    overlap = 40
    chunks = chunk_text(_lecture(), chunk_size=200, overlap=overlap)
    for prev, nxt in zip(chunks, chunks[1:]):
        assert nxt.text.startswith(prev.text[-overlap:].lstrip())


def test_chunks_respect_size_when_sentences_are_short():
    chunks = chunk_text(_lecture(), chunk_size=200, overlap=40)
    assert all(len(c.text) <= 200 for c in chunks)


def test_every_sentence_appears_whole_in_some_chunk():
    text = _lecture(25)
    chunks = chunk_text(text, chunk_size=150, overlap=30)
    for sentence in split_sentences(text):
        assert any(sentence in c.text for c in chunks)


def test_is_deterministic():
    text = _lecture()
    assert chunk_text(text, 300, 50) == chunk_text(text, 300, 50)


def test_newlines_between_sentences_become_single_spaces():
    chunks = chunk_text("First point.\n\nSecond point!\tThird?", 1000, 200)
    assert [c.text for c in chunks] == ["First point. Second point! Third?"]


def test_split_keeps_punctuation_and_ignores_abbreviation_rules():
    assert split_sentences("Dr. Smith paid 3.50 today! Really? Yes.") == [
        "Dr.", "Smith paid 3.50 today!", "Really?", "Yes.",
    ]
    assert split_sentences("") == [""]


def test_unicode_text():
    chunks = chunk_text("Olá mundo! ¿Qué tal? Muy bien.", chunk_size=12, overlap=3)
    assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
    assert chunks[0].text == "Olá mundo!"


def test_to_dict():
    chunk = chunk_text("One sentence.")[0]
    assert chunk.to_dict() == {"text": "One sentence.", "start_index": 0, "end_index": 13, "chunk_index": 0}


@pytest.mark.parametrize("chunk_size,overlap", [(0, 0), (-5, 0), (10, -1), (10, 10), (10, 50)])
def test_invalid_configuration_is_rejected(chunk_size, overlap):
    with pytest.raises(ChunkingConfigError):
        chunk_text("Some text. More text.", chunk_size=chunk_size, overlap=overlap)


def test_config_error_is_a_value_error():
    assert issubclass(ChunkingConfigError, ValueError)


def test_lengths_count_code_points():
    # two emoji are four UTF-16 units but two characters here
    chunks = chunk_text("😀😀. B.", chunk_size=6, overlap=1)
    assert [c.text for c in chunks] == ["😀😀. B."]
    assert chunks[0].end_index == 6
