from ddt import ddt, data
import json
from unittest import TestCase

from phrasecache.codec import CorruptRecord, FORMAT_VERSION, decode, encode
from phrasecache.model import CacheRecord


def make_record(**kw) -> CacheRecord:
    fields = dict(
        key='5d41402abc4b2a76b9719d911017c592',
        url='https://api.phraseapp.com/v2/projects/1/locales/1/download?file_format=yml',
        etag='"v1"',
        status=200,
        reason='OK',
        version=11,
        headers=[
            ('Content-Type', 'application/octet-stream'),
            ('Set-Cookie', 'a=1'),
            ('ETag', '"v1"'),
            ('Set-Cookie', 'b=2'),
        ],
        content_length=8,
        transfer_encoding=[],
        body=b'\x00\x01hello\xff\x00',
    )
    fields.update(kw)
    return CacheRecord(**fields)


@ddt
class TestCodec(TestCase):
    def test_round_trip(self):
        record = make_record(transfer_encoding=['chunked'])

        encoded = encode(record)
        decoded = decode(encoded)

        self.assertEqual(record, decoded)
        self.assertEqual(encoded, encode(decoded))

    def test_header_order_and_repetition_survive(self):
        decoded = decode(encode(make_record()))

        self.assertEqual(['Content-Type', 'Set-Cookie', 'ETag', 'Set-Cookie'], [name for name, _ in decoded.headers])
        self.assertEqual([('Set-Cookie', 'a=1'), ('Set-Cookie', 'b=2')],
                         [pair for pair in decoded.headers if pair[0] == 'Set-Cookie'])

    def test_empty_body(self):
        record = make_record(body=b'', content_length=0)

        self.assertEqual(record, decode(encode(record)))

    def test_encoding_is_json(self):
        document = json.loads(encode(make_record()).decode('utf-8'))

        self.assertEqual(FORMAT_VERSION, document['version'])
        self.assertEqual('AAFoZWxsb/8A', document['record']['body'])

    @data(
        b'',
        b'\xff\xfe\x00',
        b'not json at all',
        b'[1, 2, 3]',
        b'{"version": 1}',
        b'{"version": 999, "record": {}}',
        b'{"version": 1, "record": []}',
        b'{"version": 1, "record": {"key": "k"}}',
        b'[' * 100000,
        b'{"version": 1, "record": ' * 50000,
    )
    def test_foreign_data_is_corrupt(self, data):
        with self.assertRaises(CorruptRecord):
            decode(data)

    def test_truncated_data_is_corrupt(self):
        encoded = encode(make_record())

        for length in (1, len(encoded) // 2, len(encoded) - 1):
            with self.assertRaises(CorruptRecord):
                decode(encoded[:length])

    @data(
        ('status', '200'),
        ('status', True),
        ('etag', None),
        ('headers', [['Only-A-Name']]),
        ('headers', 'Content-Type'),
        ('body', 'not base64!'),
        ('body', 12),
    )
    def test_mistyped_fields_are_corrupt(self, value):
        field, replacement = value
        document = json.loads(encode(make_record()).decode('utf-8'))
        document['record'][field] = replacement

        with self.assertRaises(CorruptRecord):
            decode(json.dumps(document).encode('utf-8'))
