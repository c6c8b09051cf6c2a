"""Tests for gffwindow.tools.reference module."""

from gffwindow.tools.reference import (
    load_reference_lengths,
    read_reference_lengths,
    reference_upper_bound,
)


class TestReadReferenceLengths:
    """Test cases for read_reference_lengths function."""

    def test_organism_sections(self):
        """Test parsing organism headers and length lines."""
        lines = ["#Yeast", "chrI\t230218", "chrII\t813184", "", "#other", "1\t100"]

        lengths = read_reference_lengths(lines)

        assert lengths == {"yeast": {"chri": 230218, "chrii": 813184}, "other": {"1": 100}}

    def test_malformed_lines_ignored(self):
        """Test lines before any header and lines without a length."""
        lengths = read_reference_lengths(["chr1\t10", "#x", "chr1", "chr2\tlong", "chr3\t30"])

        assert lengths == {"x": {"chr3": 30}}


class TestLoadReferenceLengths:
    """Test cases for load_reference_lengths function."""

    def test_bundled_table(self):
        """Test the reference table shipped with the package."""
        lengths = load_reference_lengths()

        assert set(lengths) == {"arabidopsis", "rice", "puffer"}
        assert lengths["arabidopsis"]["chr1"] == 30432563
        assert lengths["rice"]["chrm"] == 490520
        assert lengths["puffer"]["15_random"] == 3234215

    def test_user_table(self, tmp_path):
        """Test reading a table from a file."""
        path = tmp_path / "lengths.txt"
        path.write_text("#test\nchr1\t500\n")

        assert load_reference_lengths(path) == {"test": {"chr1": 500}}


class TestReferenceUpperBound:
    """Test cases for reference_upper_bound function."""

    def test_table_length(self):
        """Test that a known sequence uses the table length."""
        lengths = {"arabidopsis": {"chr1": 1000}}

        assert reference_upper_bound(lengths, "Arabidopsis", "chr1", 120) == 1000

    def test_fallback_to_last_end(self):
        """Test unknown sequences and missing organisms."""
        lengths = {"arabidopsis": {"chr1": 1000}}

        assert reference_upper_bound(lengths, "arabidopsis", "chr9", 120) == 120
        assert reference_upper_bound(lengths, None, "chr1", 120) == 120
        assert reference_upper_bound({}, "rice", "chr1", 75) == 75
