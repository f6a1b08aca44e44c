from cldapping.parser.structure import structure, HEADER_SIZE, FOOTER_SIZE
from cldapping.parser.names import decompress_names
from cldapping.errors import TruncatedStructureError, InsufficientNamesError, UnexpectedFooterError

from frozendict import frozendict

import uuid
from enum import IntEnum

class Opcode(IntEnum):
    LOGON_PRIMARY_QUERY = 7
    LOGON_PRIMARY_RESPONSE = 12
    LOGON_SAM_LOGON_REQUEST = 18
    LOGON_SAM_LOGON_RESPONSE = 19
    LOGON_SAM_PAUSE_RESPONSE = 20
    LOGON_SAM_USER_UNKNOWN = 21
    LOGON_SAM_LOGON_RESPONSE_EX = 23
    LOGON_SAM_PAUSE_RESPONSE_EX = 24
    LOGON_SAM_USER_UNKNOWN_EX = 25

# DS_FLAG, see [MS-ADTS] 6.3.1.2
DS_FLAGS = frozendict({
    'DS_PDC_FLAG': 0x00000001,
    'DS_GC_FLAG': 0x00000004,
    'DS_LDAP_FLAG': 0x00000008,
    'DS_DS_FLAG': 0x00000010,
    'DS_KDC_FLAG': 0x00000020,
    'DS_TIMESERV_FLAG': 0x00000040,
    'DS_CLOSEST_FLAG': 0x00000080,
    'DS_WRITABLE_FLAG': 0x00000100,
    'DS_GOOD_TIMESERV_FLAG': 0x00000200,
    'DS_NDNC_FLAG': 0x00000400,
    'DS_SELECT_SECRET_DOMAIN_6_FLAG': 0x00000800,
    'DS_FULL_SECRET_DOMAIN_6_FLAG': 0x00001000,
    'DS_WS_FLAG': 0x00002000,
    'DS_DS_8_FLAG': 0x00004000,
    'DS_DS_9_FLAG': 0x00008000,
    'DS_DNS_CONTROLLER_FLAG': 0x20000000,
    'DS_DNS_DOMAIN_FLAG': 0x40000000,
    'DS_DNS_FOREST_FLAG': 0x80000000,
})

# the order and spelling here is what ends up on the "Server Flags" line
SERVER_FLAG_TOKENS = (
    ('isPrimaryDomainController', 'PDC'),
    ('isGlobalCatalog', 'GC'),
    ('isDomainController', 'DC'),
    ('isLdapServer', 'LDAP'),
    ('isKeyDistributionCenter', 'KDC'),
    ('isInClientSite', 'IN_SITE'),
    ('isWritable', 'WRITABLE'),
    ('isReadOnly', 'READ_ONLY'),
    ('isTimeServer', 'TIME_SERV'),
    ('isGoodTimeServer', 'GOOD_TIME_SRV'),
    ('hasActiveDirectoryWebService', 'WEB_SERVICE'),
)

NETLOGON_NT_VERSION_5EX = 0x00000004
LM_TOKEN = 0xffff
NUM_NAMES = 8

class WrapStruct(object):
    structName = None
    size = 0

    def __init__(self, buf, log=None):
        self.log = log

        if len(buf) < self.size:
            raise TruncatedStructureError(type(self).__name__, self.size, len(buf))

        try:
            self._data = getattr(structure, self.structName)(bytes(buf[:self.size]))
        except EOFError as exc:
            raise TruncatedStructureError(type(self).__name__, self.size, len(buf)) from exc

    def __getattr__(self, attr):
        if attr.startswith('__') and attr.endswith('__'):
            raise AttributeError

        return getattr(self._data, attr)

class Header(WrapStruct):
    structName = 'NETLOGON_SAM_LOGON_RESPONSE_EX_HEADER'
    size = HEADER_SIZE

    def __init__(self, buf, log=None):
        super().__init__(buf, log)

        # DomainGuid sits at offset 8, after Opcode, Sbz and Flags
        self.domainGuid = uuid.UUID(bytes_le=bytes(buf[8:self.size]))

        try:
            self.opcode = Opcode(self.Opcode)
        except ValueError:
            self.opcode = self.Opcode

        if self.opcode != Opcode.LOGON_SAM_LOGON_RESPONSE_EX and self.log:
            self.log.warn(f"Unexpected NETLOGON opcode {self.opcode!r}, decoding as LOGON_SAM_LOGON_RESPONSE_EX")

class Footer(WrapStruct):
    structName = 'NETLOGON_SAM_LOGON_RESPONSE_EX_FOOTER'
    size = FOOTER_SIZE

    @property
    def valid(self):
        return bool(self.NtVersion & NETLOGON_NT_VERSION_5EX) and self.LmNtToken == LM_TOKEN and self.Lm20Token == LM_TOKEN

def _flag(name):
    mask = DS_FLAGS[name]
    return property(lambda self: (self.flags & mask) != 0)

class PingResponse(object):
    """
    Domain controller information from a CLDAP ping (NETLOGON_SAM_LOGON_RESPONSE_EX).

    Read-only once constructed. The user name that the response carries in
    sixth position is not kept, we never ask for it.
    """

    def __init__(self, domainGuid, flags, names, opcode=Opcode.LOGON_SAM_LOGON_RESPONSE_EX, ntVersion=None):
        if len(names) < NUM_NAMES:
            raise InsufficientNamesError(len(names), NUM_NAMES)

        object.__setattr__(self, '_data', frozendict({
            'domainGuid': domainGuid,
            'flags': flags,
            'opcode': opcode,
            'ntVersion': ntVersion,
            'dnsForestName': names[0],
            'dnsDomainName': names[1],
            'dnsHostName': names[2],
            'netbiosDomainName': names[3],
            'netbiosComputerName': names[4],
            'dcSiteName': names[6],
            'clientSiteName': names[7],
        }))

    def __getattr__(self, attr):
        if attr.startswith('__') and attr.endswith('__'):
            raise AttributeError

        try:
            return self._data[attr]
        except KeyError:
            raise AttributeError(attr) from None

    def __setattr__(self, attr, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, attr):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __eq__(self, other):
        if not isinstance(other, PingResponse):
            return NotImplemented
        return self._data == other._data

    def __hash__(self):
        return hash(self._data)

    def __repr__(self):
        return f"<PingResponse {self.dnsHostName} ({self.domainGuid}) flags=0x{self.flags:08x}>"

    isPrimaryDomainController = _flag('DS_PDC_FLAG')
    isGlobalCatalog = _flag('DS_GC_FLAG')
    isLdapServer = _flag('DS_LDAP_FLAG')
    isDomainController = _flag('DS_DS_FLAG')
    isKeyDistributionCenter = _flag('DS_KDC_FLAG')
    isTimeServer = _flag('DS_TIMESERV_FLAG')
    isInClientSite = _flag('DS_CLOSEST_FLAG')
    isWritable = _flag('DS_WRITABLE_FLAG')
    isGoodTimeServer = _flag('DS_GOOD_TIMESERV_FLAG')
    isApplicationNamingContext = _flag('DS_NDNC_FLAG')
    isReadOnly = _flag('DS_SELECT_SECRET_DOMAIN_6_FLAG')
    hasActiveDirectoryWebService = _flag('DS_WS_FLAG')
    isWindows2003R2OrAbove = _flag('DS_FULL_SECRET_DOMAIN_6_FLAG')
    isWindows2008R2OrAbove = _flag('DS_DS_8_FLAG')
    isWindows2012R2OrAbove = _flag('DS_DS_9_FLAG')
    hasDnsName = _flag('DS_DNS_CONTROLLER_FLAG')
    isDefaultNamingContext = _flag('DS_DNS_DOMAIN_FLAG')
    isForestNamingContext = _flag('DS_DNS_FOREST_FLAG')

    @property
    def serverFlags(self):
        return ' '.join(token for attr, token in SERVER_FLAG_TOKENS if getattr(self, attr))

    def __str__(self):
        lines = [
            ('Domain GUID:', self.domainGuid),
            ('Forest DNS Name:', self.dnsForestName),
            ('Domain DNS Name:', self.dnsDomainName),
            ('NetBIOS Domain Name:', self.netbiosDomainName),
            ('NetBIOS Server Name:', self.netbiosComputerName),
            ('Server Site Name:', self.dcSiteName),
            ('Client Site Name:', self.clientSiteName),
            ('Server Flags:', self.serverFlags),
            ('WS2003R2+:', self.isWindows2003R2OrAbove),
            ('WS2008R2+:', self.isWindows2008R2OrAbove),
            ('WS2012R2+:', self.isWindows2012R2OrAbove),
        ]
        return ''.join(f"{label:<22}{value}\n" for label, value in lines)

class NetlogonResponse(object):
    def __init__(self, payload, log=None):
        self.payload = bytes(payload)
        self.log = log

        # typically, you would call as follows:

        # self.parseHeader()
        # self.parseNames()
        # self.parseFooter()
        # self.validate()

    def parseHeader(self):
        self.header = Header(self.payload, log=self.log)

        if self.log:
            self.log.debug(f"Header: opcode={self.header.opcode!r} flags=0x{self.header.Flags:08x} guid={self.header.domainGuid}")

    def parseNames(self):
        # the footer is anchored to the end of the payload, whatever the names consumed
        region = self.payload[HEADER_SIZE:max(HEADER_SIZE, len(self.payload) - FOOTER_SIZE)]
        self.names, self.labels = decompress_names(region, base=HEADER_SIZE, log=self.log)

        if self.log:
            self.log.debug(f"Decompressed {len(self.names)} names from {len(region)} bytes")

        if len(self.names) < NUM_NAMES:
            raise InsufficientNamesError(len(self.names), NUM_NAMES)

    def parseFooter(self):
        self.footer = Footer(self.payload[-FOOTER_SIZE:], log=self.log)

    def validate(self):
        if not self.footer.valid:
            raise UnexpectedFooterError(self.footer.NtVersion, self.footer.LmNtToken, self.footer.Lm20Token)

    def getResponse(self):
        return PingResponse(self.header.domainGuid, self.header.Flags, self.names,
                            opcode=self.header.opcode, ntVersion=self.footer.NtVersion)

def decode_netlogon(payload, log=None):
    """Decode a raw NETLOGON_SAM_LOGON_RESPONSE_EX payload into a PingResponse."""
    resp = NetlogonResponse(payload, log=log)
    resp.parseHeader()
    resp.parseNames()
    resp.parseFooter()
    resp.validate()
    return resp.getResponse()
