"""Tests for the PGM codec.

Verifies:
    - Header parsing (tag, comment line, width/height, max value)
    - P2 and P5 payload decoding, including newline bytes inside P5 payloads
    - Corrupted input rejection (short payload, out-of-range samples, bad tokens)
    - Encoding mismatch vs. unknown tag
    - Input size limits
    - Bit-exact serialization of both encodings
    - P5 output readable by an independent decoder (Pillow)

Run: pytest tests/test_codec.py -v
"""
import io

import pytest

from conftest import make_pgm
from pnmdump.raster.codec import DEFAULT_COMMENT, read_pgm, write_header, write_pgm
from pnmdump.raster.errors import (
    CorruptedFileError,
    EncodingMismatchError,
    InputTooLargeError,
    UnsupportedMaxValueError,
)
from pnmdump.raster.image import Encoding, PgmHeader, RasterImage


def _read(data: bytes, expected=None, **limits) -> RasterImage:
    return read_pgm(io.BytesIO(data), expected, **limits)


class TestReadHeader:
    """Header fields and structural checks."""

    def test_p2_header_fields(self, p2_3x2):
        image = _read(p2_3x2)
        assert image.header == PgmHeader(Encoding.P2, 3, 2, 255)

    def test_p5_header_fields(self, p5_3x2):
        image = _read(p5_3x2)
        assert image.header == PgmHeader(Encoding.P5, 3, 2, 255)

    def test_comment_content_is_ignored(self):
        data = make_pgm("P2", 1, 1, 9, b"7\n", comment=b"# 12 34 anything P5")
        assert _read(data).to_rows() == [[7]]

    def test_crlf_header_lines(self):
        data = b"P2\r\n# c\r\n2 1\r\n255\r\n1 2\r\n"
        image = _read(data)
        assert image.header == PgmHeader(Encoding.P2, 2, 1, 255)
        assert image.to_rows() == [[1, 2]]

    @pytest.mark.parametrize("data", [
        b"",
        b"P2\n",
        b"P2\n# c\n",
        b"P2\n# c\n3 2\n",
        b"P2\n# c\n3\n255\n0 0 0\n",
        b"P2\n# c\n3 x\n255\n0 0 0\n",
        b"P2\n# c\n3 2 1\n255\n0 0 0 0 0 0\n",
        b"P2\n# c\n3 2\nmax\n0 0 0 0 0 0\n",
    ])
    def test_malformed_header_is_corrupted(self, data):
        with pytest.raises(CorruptedFileError):
            _read(data)

    @pytest.mark.parametrize("size", [b"0 2", b"3 0", b"-1 2"])
    def test_non_positive_dimensions(self, size):
        data = b"P2\n# c\n" + size + b"\n255\n0\n"
        with pytest.raises(CorruptedFileError):
            _read(data)

    def test_zero_max_value(self):
        with pytest.raises(CorruptedFileError):
            _read(make_pgm("P2", 1, 1, 0, b"0\n"))

    def test_unknown_tag_is_corrupted_not_mismatch(self):
        data = make_pgm("P6", 1, 1, 255, b"\x00")
        with pytest.raises(CorruptedFileError) as exc:
            _read(data)
        assert not isinstance(exc.value, EncodingMismatchError)

    def test_encoding_mismatch(self, p5_3x2):
        with pytest.raises(EncodingMismatchError) as exc:
            _read(p5_3x2, Encoding.P2)
        assert exc.value.expected == "P2"
        assert exc.value.found == "P5"
        assert isinstance(exc.value, CorruptedFileError)

    def test_expected_encoding_accepted(self, p2_3x2):
        assert _read(p2_3x2, Encoding.P2).encoding is Encoding.P2

    def test_input_too_large_default_limit(self):
        data = make_pgm("P2", 513, 1, 255, b"0 " * 513)
        with pytest.raises(InputTooLargeError):
            _read(data)

    def test_input_limit_is_inclusive(self):
        data = make_pgm("P5", 512, 1, 255, bytes(512))
        assert _read(data).width == 512

    def test_custom_input_limits(self, p2_3x2):
        with pytest.raises(InputTooLargeError):
            _read(p2_3x2, max_width=2, max_height=2)


class TestReadPayload:
    """Sample decoding and range checks."""

    def test_p2_samples(self, p2_3x2):
        assert _read(p2_3x2).to_rows() == [[0, 128, 255], [64, 32, 16]]

    def test_p2_samples_across_arbitrary_whitespace(self):
        data = make_pgm("P2", 3, 2, 255, b"0\t128\n\n 255 64\n32    16")
        assert _read(data).to_rows() == [[0, 128, 255], [64, 32, 16]]

    def test_p5_samples(self, p5_3x2):
        assert _read(p5_3x2).to_rows() == [[0, 128, 255], [64, 32, 16]]

    def test_p5_payload_with_whitespace_bytes(self):
        # 0x0A, 0x20, 0x09, 0x0D are samples, not separators
        data = make_pgm("P5", 2, 2, 255, bytes([10, 32, 9, 13]))
        assert _read(data).to_rows() == [[10, 32], [9, 13]]

    def test_p2_too_few_samples(self):
        data = make_pgm("P2", 3, 2, 255, b"1 2 3 4 5\n")
        with pytest.raises(CorruptedFileError):
            _read(data)

    def test_p2_extra_tokens_ignored(self):
        data = make_pgm("P2", 2, 1, 255, b"1 2 3 garbage\n")
        assert _read(data).to_rows() == [[1, 2]]

    @pytest.mark.parametrize("payload", [b"50 101\n", b"-1 5\n", b"1 a\n", b"1 2.5\n"])
    def test_p2_bad_samples(self, payload):
        data = make_pgm("P2", 2, 1, 100, payload)
        with pytest.raises(CorruptedFileError):
            _read(data)

    def test_p2_sample_equal_to_max_value(self):
        data = make_pgm("P2", 2, 1, 100, b"0 100\n")
        assert _read(data).to_rows() == [[0, 100]]

    def test_p5_short_payload(self):
        data = make_pgm("P5", 2, 2, 255, bytes([1, 2, 3]))
        with pytest.raises(CorruptedFileError):
            _read(data)

    def test_p5_trailing_bytes(self):
        data = make_pgm("P5", 2, 2, 255, bytes([1, 2, 3, 4, 5]))
        with pytest.raises(CorruptedFileError):
            _read(data)

    def test_p5_sample_above_max_value(self):
        data = make_pgm("P5", 2, 1, 100, bytes([5, 200]))
        with pytest.raises(CorruptedFileError):
            _read(data)

    def test_image_buffer_is_read_only(self, p2_3x2):
        image = _read(p2_3x2)
        with pytest.raises(ValueError):
            image.pixels[0, 0] = 1


class TestWrite:
    """Serialization of headers and payloads."""

    ROWS = [[0, 128, 255], [64, 32, 16]]

    def _sample_at(self, row, col):
        return self.ROWS[row][col]

    def test_header_layout(self):
        buf = io.BytesIO()
        write_header(buf, PgmHeader(Encoding.P5, 3, 2, 255))
        assert buf.getvalue() == b"P5\n# Generated by pnmdump\n3 2\n255\n"

    def test_write_p2(self):
        buf = io.BytesIO()
        write_pgm(buf, PgmHeader(Encoding.P2, 3, 2, 255), self._sample_at)
        assert buf.getvalue() == (
            b"P2\n# Generated by pnmdump\n3 2\n255\n0 128 255\n64 32 16\n"
        )

    def test_write_p5(self):
        buf = io.BytesIO()
        write_pgm(buf, PgmHeader(Encoding.P5, 3, 2, 255), self._sample_at)
        assert buf.getvalue() == (
            b"P5\n# Generated by pnmdump\n3 2\n255\n" + bytes([0, 128, 255, 64, 32, 16])
        )

    def test_custom_comment(self):
        buf = io.BytesIO()
        write_pgm(buf, PgmHeader(Encoding.P2, 3, 2, 255), self._sample_at, comment="# hi")
        assert buf.getvalue().split(b"\n")[1] == b"# hi"

    def test_p5_rejects_wide_max_value_before_writing(self):
        buf = io.BytesIO()
        with pytest.raises(UnsupportedMaxValueError):
            write_pgm(buf, PgmHeader(Encoding.P5, 1, 1, 1000), lambda r, c: 0)
        assert buf.getvalue() == b""

    def test_p2_allows_wide_max_value(self):
        buf = io.BytesIO()
        write_pgm(buf, PgmHeader(Encoding.P2, 1, 1, 1000), lambda r, c: 999)
        assert buf.getvalue().endswith(b"1000\n999\n")

    def test_written_file_reads_back(self):
        buf = io.BytesIO()
        write_pgm(buf, PgmHeader(Encoding.P2, 3, 2, 255), self._sample_at)
        buf.seek(0)
        assert read_pgm(buf).to_rows() == self.ROWS

    def test_default_comment_constant(self):
        assert DEFAULT_COMMENT.startswith("#")


class TestInterop:
    """Output accepted by an independent PGM decoder."""

    def test_pillow_reads_p5_output(self):
        Image = pytest.importorskip("PIL.Image")
        rows = [[0, 10, 20, 30], [40, 50, 60, 70], [80, 90, 100, 110]]
        buf = io.BytesIO()
        write_pgm(buf, PgmHeader(Encoding.P5, 4, 3, 255), lambda r, c: rows[r][c])
        buf.seek(0)

        with Image.open(buf) as img:
            assert img.size == (4, 3)
            assert img.mode == "L"
            assert list(img.getdata()) == [v for row in rows for v in row]
