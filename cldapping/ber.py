from ldap3.protocol.rfc4511 import LDAPMessage, MessageID, ProtocolOp, SearchRequest, LDAPDN, Scope, DerefAliases, \
    Integer0ToMax, TypesOnly, Filter, And, EqualityMatch, AttributeDescription, AssertionValue, AttributeSelection, \
    Selector
from pyasn1.codec.ber import encoder, decoder
from pyasn1.error import PyAsn1Error

from cldapping.errors import EncodingError, EnvelopeDecodeError

CLDAP_MESSAGE_ID = 1
NETLOGON_ATTRIBUTE = 'Netlogon'

# NETLOGON_NT_VERSION_5 | NETLOGON_NT_VERSION_5EX as a little endian DWORD,
# asks for a NETLOGON_SAM_LOGON_RESPONSE_EX
NT_VERSION = b'\x06\x00\x00\x00'

def _equalityMatch(attribute, value):
    matching_filter = EqualityMatch()
    matching_filter['attributeDesc'] = AttributeDescription(attribute)
    matching_filter['assertionValue'] = AssertionValue(value)

    compiled_filter = Filter()
    compiled_filter.setComponentByName('equalityMatch', matching_filter)
    return compiled_filter

def build_ping_request(dns_name=None):
    """
    Build the LDAPMessage for a CLDAP ping:

        (&(Host=<dns_name>)(NtVer=\\06\\00\\00\\00)) on the rootDSE, asking for Netlogon

    A missing dns_name queries for an empty Host.
    """
    if dns_name is None:
        dns_name = b''
    elif isinstance(dns_name, str):
        dns_name = dns_name.encode('utf-8')
    elif not isinstance(dns_name, bytes):
        raise EncodingError(f"DNS name must be str or bytes, not {type(dns_name).__name__}")

    boolean_filter = And()
    boolean_filter[0] = _equalityMatch('Host', dns_name)
    boolean_filter[1] = _equalityMatch('NtVer', NT_VERSION)

    search_filter = Filter()
    search_filter['and'] = boolean_filter

    attribute_selection = AttributeSelection()
    attribute_selection[0] = Selector(NETLOGON_ATTRIBUTE)

    request = SearchRequest()
    request['baseObject'] = LDAPDN('')
    request['scope'] = Scope('baseObject')
    request['derefAliases'] = DerefAliases('neverDerefAliases')
    request['sizeLimit'] = Integer0ToMax(0)
    request['timeLimit'] = Integer0ToMax(0)
    request['typesOnly'] = TypesOnly(False)
    request['filter'] = search_filter
    request['attributes'] = attribute_selection

    message = LDAPMessage()
    message['messageID'] = MessageID(CLDAP_MESSAGE_ID)
    message['protocolOp'] = ProtocolOp().setComponentByName('searchRequest', request)
    return message

def encode_ping(dns_name=None):
    """BER encode a CLDAP ping for dns_name, ready to be sent over UDP."""
    try:
        return encoder.encode(build_ping_request(dns_name))
    except PyAsn1Error as exc:
        raise EncodingError(f"Unable to encode CLDAP ping request for {dns_name!r}") from exc

def decode_envelope(envelope):
    """
    Extract the raw NETLOGON payload from a CLDAP ping response datagram.

    The datagram holds a searchResEntry followed by a searchResDone, only the
    first message is looked at. The payload is the first value of the first
    attribute of the entry.
    """
    try:
        message, _ = decoder.decode(bytes(envelope), asn1Spec=LDAPMessage())
    except (PyAsn1Error, TypeError, ValueError, OverflowError) as exc:
        raise EnvelopeDecodeError("Failed to decode CLDAP ping response") from exc

    protocolOp = message['protocolOp']
    if protocolOp.getName() != 'searchResEntry':
        raise EnvelopeDecodeError(f"CLDAP ping response is a {protocolOp.getName()}, not a searchResEntry")

    attributes = protocolOp['searchResEntry']['attributes']
    if len(attributes) < 1 or len(attributes[0]['vals']) < 1:
        raise EnvelopeDecodeError("Decoded CLDAP ping response gave unexpected result")

    value = attributes[0]['vals'][0]
    if not value.hasValue():
        raise EnvelopeDecodeError("Decoded CLDAP ping response gave unexpected result")

    return value.asOctets()
