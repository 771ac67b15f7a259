import struct

import numpy as np
import pytest

from helpers import read_curv, read_tag_table, read_vcgt, tag_data
from icc_rw import ICCProfile


@pytest.fixture
def icc(created):
    return ICCProfile(created=created)


def test_header_fields(icc):
    icc.write_XYZType('wtpt', [(0.9505, 1.0, 1.0891)])
    data = icc.rebuild()
    assert struct.unpack(">I", data[0:4])[0] == len(data)
    assert data[8:12] == b'\x02\x10\x00\x00'
    assert data[12:16] == b'mntr'
    assert data[16:20] == b'RGB '
    assert data[20:24] == b'XYZ '
    assert struct.unpack(">6H", data[24:36]) == (2024, 3, 9, 21, 15, 42)
    assert data[36:40] == b'acsp'
    assert data[40:44] == b'MSFT'
    assert struct.unpack(">3i", data[68:80]) == (63190, 65536, 54061)
    assert data[84:128] == b'\x00' * 44


def test_empty_profile(icc):
    data = icc.rebuild()
    assert len(data) == 132
    assert read_tag_table(data) == []


def test_vcgt_layout(icc):
    icc.write_vcgt([0, 1, 65535], [2, 3, 4], [5, 6, 7])
    data = icc.rebuild()
    block = tag_data(data, 'vcgt')
    assert len(block) == 18 + 3 * 3 * 2
    assert block[4:8] == b'\x00' * 4
    red, green, blue = read_vcgt(block)
    assert red.tolist() == [0, 1, 65535]
    assert green.tolist() == [2, 3, 4]
    assert blue.tolist() == [5, 6, 7]


def test_vcgt_rejects_unequal_channels(icc):
    with pytest.raises(ValueError):
        icc.write_vcgt([0, 1], [0, 1, 2], [0, 1])


def test_curv(icc):
    icc._write_curve_samples('rTRC', np.array([0, 100, 65535]))
    block = tag_data(icc.rebuild(), 'rTRC')
    assert len(block) == 12 + 6
    assert read_curv(block).tolist() == [0, 100, 65535]


def test_desc_is_v2_text_description(icc):
    icc.write_desc("Warm")
    block = tag_data(icc.rebuild(), 'desc')
    assert block[0:4] == b'desc'
    assert struct.unpack(">I", block[8:12])[0] == 5
    assert block[12:17] == b'Warm\x00'
    lang, count = struct.unpack(">II", block[17:25])
    assert count == 5
    assert block[25:35].decode('utf-16-be') == "Warm\x00"
    # ScriptCode (3) + Macintosh description (67)
    assert len(block) == 35 + 3 + 67


def test_desc_non_ascii_keeps_unicode(icc):
    icc.write_desc("Gamma für Büro")
    block = tag_data(icc.rebuild(), 'desc')
    ascii_len = struct.unpack(">I", block[8:12])[0]
    assert block[12:12 + ascii_len] == b'Gamma f?r B?ro\x00'
    pos = 12 + ascii_len
    count = struct.unpack(">I", block[pos + 4:pos + 8])[0]
    text = block[pos + 8:pos + 8 + count * 2].decode('utf-16-be')
    assert text == "Gamma für Büro\x00"


def test_text_type(icc):
    icc.write_cprt("Public domain")
    block = tag_data(icc.rebuild(), 'cprt')
    assert block == b'text\x00\x00\x00\x00Public domain\x00'


def test_xyz_encoding(icc):
    icc.write_XYZType('rXYZ', [(0.4361, 0.2225, 0.0139)])
    block = tag_data(icc.rebuild(), 'rXYZ')
    assert block[0:8] == b'XYZ \x00\x00\x00\x00'
    assert struct.unpack(">3i", block[8:20]) == (28580, 14582, 911)


def test_layout_is_aligned_and_in_order(icc):
    icc.write_cprt("abc")  # 12 bytes, no padding
    icc.write_cprt("abcd")  # rewrite keeps the slot, 13 bytes
    icc.write_desc("odd")
    icc.write_vcgt([0, 65535], [0, 65535], [0, 65535])
    data = icc.rebuild()
    table = read_tag_table(data)
    assert [sig for sig, _, _ in table] == ['cprt', 'desc', 'vcgt']
    assert table[0][2] == 13
    assert table[0][1] == 132 + 3 * 12
    for sig, offset, size in table:
        assert offset % 4 == 0
    for (_, off_a, size_a), (_, off_b, _) in zip(table, table[1:]):
        assert off_a + size_a <= off_b
    assert len(data) % 4 == 0
    assert icc.tag_table == table


def test_bad_tag_name(icc):
    with pytest.raises(ValueError):
        icc.write_tag('toolong', b'')
