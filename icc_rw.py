import struct
import datetime
import logging

import numpy as np
from meta_data import *


def _pad4(block):
    return b'\x00' * ((4 - len(block) % 4) % 4)


class ICCProfile:
    """
    ICC v2 显示器配置文件的写入器。
    写入顺序即 tag 表顺序; rebuild() 生成完整的字节序列到 self.data
    """

    def __init__(self, created=None):
        if created is None:
            created = datetime.datetime.now(datetime.timezone.utc)
        self.version = ICC_VERSION
        self.device_class = ICC_DEVICE_CLASS
        self.color_space = ICC_COLOR_SPACE
        self.pcs = ICC_PCS
        self.created = created
        self.platform = ICC_PLATFORM
        self.rendering_intent = ICC_RENDERING_INTENT
        self.illuminant = D50_XYZ
        self.tags = {}
        self.tag_table = []
        self.data = bytearray()

    def _encode_s15fixed16(self, value: float) -> bytes:
        return struct.pack(">i", int(round(value * 65536)))

    def write_tag(self, tag_name: str, tag_bytes: bytes):
        if len(tag_name) != 4:
            raise ValueError(f"tag signature must be 4 characters: {tag_name!r}")
        if tag_name not in self.tags:
            self.tags[tag_name] = {'index': len(self.tags)}
        self.tags[tag_name]['new_data'] = bytes(tag_bytes)

    def write_XYZType(self, tag, values):
        block = bytearray(b'XYZ ' + b'\x00\x00\x00\x00')
        for x, y, z in values:
            block += self._encode_s15fixed16(x)
            block += self._encode_s15fixed16(y)
            block += self._encode_s15fixed16(z)
        self.write_tag(tag, block)

    def write_textType(self, tag, value: str):
        """desc 用 v2 textDescriptionType ('desc'), 其它用 'text'"""
        if tag == 'desc':
            self.write_tag(tag, self._text_description(value))
            return
        encoded = value.encode('ascii', errors='replace') + b'\x00'
        self.write_tag(tag, b'text' + b'\x00\x00\x00\x00' + encoded)

    def _text_description(self, value: str) -> bytes:
        ascii_part = value.encode('ascii', errors='replace') + b'\x00'
        unicode_part = value.encode('utf-16-be') + b'\x00\x00'
        block = bytearray(b'desc' + b'\x00\x00\x00\x00')
        block += struct.pack(">I", len(ascii_part))
        block += ascii_part
        # unicode language code, count in 16-bit characters
        block += struct.pack(">II", 0, len(unicode_part) // 2)
        block += unicode_part
        # ScriptCode code, count, 67 byte Macintosh description
        block += struct.pack(">HB", 0, 0)
        block += b'\x00' * 67
        return bytes(block)

    def write_desc(self, value):
        self.write_textType('desc', value)

    def write_cprt(self, value):
        self.write_textType('cprt', value)

    def write_vcgt(self, red, green, blue):
        """
        写入 'vcgt' 标签 (表格形式, 16bit):
            'vcgt' | reserved(4) | gammaType u32 = 0 (table)
            channels u16 = 3 | entryCount u16 | entrySize u16 = 2
            red[entryCount] green[entryCount] blue[entryCount] (big-endian u16)
        red/green/blue: 0..65535 的整数表, 长度需一致
        """
        channels = [np.asarray(c, dtype=np.uint16) for c in (red, green, blue)]
        count = channels[0].size
        if not all(c.ndim == 1 and c.size == count for c in channels):
            raise ValueError("vcgt 通道长度需一致")
        if not 2 <= count <= 0xFFFF:
            raise ValueError(f"vcgt entry count out of range: {count}")
        payload = bytearray(b'vcgt' + b'\x00\x00\x00\x00')
        payload += struct.pack(">IHHH", 0, 3, count, 2)
        for c in channels:
            payload += c.astype('>u2').tobytes()
        self.write_tag('vcgt', payload)

    def _write_curve_samples(self, tag, values):
        vals = np.asarray(values, dtype=np.uint16)
        if vals.ndim != 1 or vals.size < 2:
            raise ValueError("curve values must be 1-D with at least 2 entries")
        block = bytearray(b'curv' + b'\x00\x00\x00\x00')
        block += struct.pack(">I", vals.size)
        block += vals.astype('>u2').tobytes()
        self.write_tag(tag, block)

    def write_rgbTRC(self, red, green, blue):
        self._write_curve_samples('rTRC', red)
        self._write_curve_samples('gTRC', green)
        self._write_curve_samples('bTRC', blue)

    def write_all(self, desc=None, cprt=None, wtpt=None, rXYZ=None, gXYZ=None,
                  bXYZ=None, rgbTRC=None, vcgt=None):
        if desc is not None: self.write_desc(desc)
        if cprt is not None: self.write_cprt(cprt)
        if wtpt is not None: self.write_XYZType('wtpt', wtpt)
        if rXYZ is not None: self.write_XYZType('rXYZ', rXYZ)
        if gXYZ is not None: self.write_XYZType('gXYZ', gXYZ)
        if bXYZ is not None: self.write_XYZType('bXYZ', bXYZ)
        if rgbTRC is not None:
            self.write_rgbTRC(rgbTRC['red'], rgbTRC['green'], rgbTRC['blue'])
        if vcgt is not None:
            self.write_vcgt(vcgt['red'], vcgt['green'], vcgt['blue'])

    def pack_header(self, profile_size):
        major, minor, bug_fix = self.version
        version = struct.pack(">BBH", major, (minor << 4) | bug_fix, 0)
        c = self.created
        date_and_time = struct.pack(">6H", c.year, c.month, c.day, c.hour, c.minute, c.second)
        illuminant = b''.join(self._encode_s15fixed16(v) for v in self.illuminant)
        header = struct.pack(
            ">I4s4s4s4s4s12s4s4sIII8sI12s4s16s28s",
            profile_size,
            ICC_CMM_TYPE,
            version,
            self.device_class,
            self.color_space,
            self.pcs,
            date_and_time,
            ICC_FILE_SIGNATURE,
            self.platform,
            0,  # profile flags
            0,  # device manufacturer
            0,  # device model
            b'\x00' * 8,  # device attributes
            self.rendering_intent,
            illuminant,
            ICC_CREATOR,
            b'\x00' * 16,  # profile ID
            b'\x00' * 28,
        )
        assert len(header) == ICC_HEADER_SIZE
        return header

    def rebuild(self):
        tag_count = len(self.tags)

        # 构建 tag table（tag count + 每个tag的entry）
        tag_table = bytearray(struct.pack('>I', tag_count))
        content = bytearray()
        offset = ICC_HEADER_SIZE + 4 + tag_count * 12
        self.tag_table = []

        # 按写入顺序排列 tag
        for tag, info in sorted(self.tags.items(), key=lambda x: x[1]['index']):
            data = info.get('new_data')
            if data is None:
                raise ValueError(f"Tag {tag} has no data available")

            # entry 记录真实长度, 数据块对齐到 4 字节
            tag_table += tag.encode('ascii')
            tag_table += struct.pack('>II', offset, len(data))
            self.tag_table.append((tag, offset, len(data)))

            content += data + _pad4(data)
            offset += len(data) + len(_pad4(data))

        total = ICC_HEADER_SIZE + len(tag_table) + len(content)
        self.data = bytearray(self.pack_header(total)) + tag_table + content
        logging.debug(f"icc profile rebuilt: {tag_count} tags, {total} bytes")
        return bytes(self.data)
