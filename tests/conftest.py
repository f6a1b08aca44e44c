import uuid
import pytest

DOMAIN_GUID = uuid.UUID('2a54ba8b-4d1c-4b8f-8d0b-2d3a7a1d5f6e')
FLAGS = 0x0003f3fd

# NETLOGON_SAM_LOGON_RESPONSE_EX as returned by a 2016 DC for an NtVer=6 ping,
# pointers are relative to the start of the header
HEADER = (
    b'\x17\x00'                           # LOGON_SAM_LOGON_RESPONSE_EX
    b'\x00\x00'
    b'\xfd\xf3\x03\x00'                   # flags
    + DOMAIN_GUID.bytes_le
)
NAMES = (
    b'\x04corp\x07contoso\x03com\x00'     # 0x18 DnsForestName
    b'\xc0\x18'                           # 0x2a DnsDomainName
    b'\x04dc01\xc0\x18'                   # 0x2c DnsHostName
    b'\x04CORP\x00'                       # 0x33 NetbiosDomainName
    b'\x04DC01\x00'                       # 0x39 NetbiosComputerName
    b'\x00'                               # 0x3f UserName
    b'\x17Default-First-Site-Name\x00'    # 0x40 DcSiteName
    b'\xc0\x40'                           # 0x59 ClientSiteName
)
FOOTER = (
    b'\x05\x00\x00\x00'                   # NETLOGON_NT_VERSION_1 | NETLOGON_NT_VERSION_5EX
    b'\xff\xff'
    b'\xff\xff'
)
PAYLOAD = HEADER + NAMES + FOOTER

def tlv(tag, content):
    if len(content) < 0x80:
        return bytes([tag, len(content)]) + content
    length = len(content).to_bytes((len(content).bit_length() + 7) // 8, 'big')
    return bytes([tag, 0x80 | len(length)]) + length + content

def search_result_entry(vals, attribute=b'Netlogon', message_id=1):
    attrs = b''
    if vals is not None:
        attrs = tlv(0x30, tlv(0x04, attribute) + tlv(0x31, b''.join(tlv(0x04, v) for v in vals)))
    entry = tlv(0x64, tlv(0x04, b'') + tlv(0x30, attrs))
    return tlv(0x30, tlv(0x02, bytes([message_id])) + entry)

SEARCH_RESULT_DONE = bytes.fromhex('300c02010165070a010004000400')

def envelope_for(payload):
    return search_result_entry([payload]) + SEARCH_RESULT_DONE

@pytest.fixture
def payload():
    return PAYLOAD

@pytest.fixture
def envelope():
    return envelope_for(PAYLOAD)

def build_payload(names=NAMES, flags=FLAGS, opcode=0x17, ntVersion=5, lmNtToken=0xffff, lm20Token=0xffff):
    header = opcode.to_bytes(2, 'little') + b'\x00\x00' + flags.to_bytes(4, 'little') + DOMAIN_GUID.bytes_le
    footer = ntVersion.to_bytes(4, 'little') + lmNtToken.to_bytes(2, 'little') + lm20Token.to_bytes(2, 'little')
    return header + names + footer
