import pytest

from cldapping.parser.names import decompress_names
from cldapping.errors import NameDecompressionError

def encode_name(name):
    out = b''
    for label in name.split('.') if name else []:
        out += bytes([len(label)]) + label.encode()
    return out + b'\x00'

def test_uncompressed_names():
    names = ['www.example.com', 'CORP', '', 'Default-First-Site-Name']
    region = b''.join(encode_name(n) for n in names)

    decoded, labels = decompress_names(region)

    assert decoded == names
    assert labels[0] == 'www'
    assert labels[4] == 'example'
    assert labels[12] == 'com'
    assert labels[16] is None

def test_pointer_matches_uncompressed():
    plain = encode_name('example.com') + encode_name('www.example.com')
    compressed = encode_name('example.com') + b'\x03www\xc0\x00'

    assert decompress_names(compressed)[0] == decompress_names(plain)[0] == ['example.com', 'www.example.com']

def test_pointer_into_middle_of_name():
    region = encode_name('dc01.corp.contoso.com') + b'\xc0\x05'

    names, _ = decompress_names(region)

    assert names == ['dc01.corp.contoso.com', 'corp.contoso.com']

def test_pointer_into_pointer_terminated_name():
    # no terminator is recorded after 'corp', so the chain runs on into 'www'
    region = encode_name('contoso.com') + b'\x04corp\xc0\x00' + b'\x03www\xc0\x0d'

    names, labels = decompress_names(region)

    assert names == ['contoso.com', 'corp.contoso.com', 'www.corp.www']
    assert 18 not in labels

def test_pointer_relative_to_base():
    region = encode_name('corp.contoso.com') + b'\xc0\x18' + b'\x04dc01\xc0\x18'

    names, labels = decompress_names(region, base=0x18)

    assert names == ['corp.contoso.com', 'corp.contoso.com', 'dc01.corp.contoso.com']
    assert labels[0x18] == 'corp'

def test_unterminated_name_dropped():
    names, labels = decompress_names(b'\x03abc\x00\x03def')

    assert names == ['abc']
    assert labels[5] == 'def'

def test_empty_region():
    assert decompress_names(b'') == ([], {})

def test_invalid_utf8_label_replaced():
    names, _ = decompress_names(b'\x02\xff\xfe\x00')

    assert names == ["\ufffd\ufffd"]

@pytest.mark.parametrize('region', [
    b'\xc0\x00',                            # nothing recorded yet
    encode_name('example.com') + b'\xc0\x02',   # inside a label
    encode_name('example.com') + b'\xc0\xff',   # past the region
    encode_name('example.com') + b'\x03www\xc0\x0c',  # the terminator
], ids=['empty-table', 'mid-label', 'past-end', 'terminator'])
def test_unresolvable_pointer(region):
    with pytest.raises(NameDecompressionError):
        decompress_names(region)

def test_truncated_pointer():
    with pytest.raises(NameDecompressionError):
        decompress_names(encode_name('example.com') + b'\xc0')

@pytest.mark.parametrize('region', [
    b'\x05ab',
    b'\x03abc\x00\x3f',
    b'\x01',
])
def test_label_past_end(region):
    with pytest.raises(NameDecompressionError):
        decompress_names(region)

def test_label_ending_at_region_end():
    # fits exactly, but is never terminated
    assert decompress_names(b'\x03abc') == ([], {0: 'abc'})
