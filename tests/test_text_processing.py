"""
Unit tests for text processing: clean_text and chunk_text.
"""

import pytest

from app.services.text_processing import chunk_text, clean_text


class TestCleanText:
    """Tests for clean_text()."""

    def test_empty_returns_empty(self) -> None:
        assert clean_text("") == ""
        assert clean_text("   ") == ""
        assert clean_text("\n\n") == ""

    def test_strips_lines_and_collapses_blank_runs(self) -> None:
        assert clean_text("  Zona A  \n\n\n\n  Zona B  ") == "Zona A\n\nZona B"

    def test_keeps_repeated_lines(self) -> None:
        # Calendar entries legitimately repeat (same waste type on consecutive dates)
        assert clean_text("Vetro\nVetro\nCarta") == "Vetro\nVetro\nCarta"

    def test_removes_control_characters(self) -> None:
        assert clean_text("Secco\x7fresiduo\x00") == "Secco residuo"

    def test_nfkc_normalization(self) -> None:
        assert clean_text("ｚｏｎａ Ａ") == "zona A"


class TestChunkText:
    """Tests for chunk_text()."""

    def test_empty_returns_empty_list(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   ") == []

    def test_short_text_returns_single_chunk(self) -> None:
        short = "2025-11-10 zona B Piombino Dese: umido, vetro."
        assert chunk_text(short, chunk_size=512, overlap=50) == [short]

    def test_long_text_respects_chunk_size(self) -> None:
        lines = [f"2025-01-{d:02d} zona A Cittadella: umido organico, secco residuo" for d in range(1, 29)]
        text = "\n".join(lines)
        chunks = chunk_text(text, chunk_size=200, overlap=40)
        assert len(chunks) >= 2
        for c in chunks:
            assert 0 < len(c) <= 200
            assert c.strip() == c

    def test_splits_on_lines_not_mid_line(self) -> None:
        lines = [f"riga {i:02d} calendario raccolta" for i in range(30)]
        chunks = chunk_text("\n".join(lines), chunk_size=120, overlap=30)
        for c in chunks:
            for piece in c.split("\n"):
                assert piece in lines

    def test_consecutive_chunks_overlap(self) -> None:
        lines = [f"riga {i:02d} calendario raccolta" for i in range(30)]
        chunks = chunk_text("\n".join(lines), chunk_size=120, overlap=30)
        assert len(chunks) >= 2
        for prev, nxt in zip(chunks, chunks[1:]):
            assert prev.split("\n")[-1] == nxt.split("\n")[0]

    def test_paragraphs_kept_together_when_they_fit(self) -> None:
        text = "Zona A\nlunedì umido\n\nZona B\nmartedì vetro"
        assert chunk_text(text, chunk_size=20, overlap=0) == ["Zona A\nlunedì umido", "Zona B\nmartedì vetro"]

    def test_unbreakable_text_is_hard_split(self) -> None:
        chunks = chunk_text("x" * 1000, chunk_size=300, overlap=50)
        assert all(len(c) <= 300 for c in chunks)
        assert len(chunks) == 4

    def test_overlap_must_be_smaller_than_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            chunk_text("x" * 100, chunk_size=50, overlap=50)
