import pwnlib.log, pwnlib.term, logging

import argparse
import socket

from cldapping.ber import encode_ping, decode_envelope
from cldapping.parser.classes import PingResponse, decode_netlogon
from cldapping.errors import CldapError, TransportError

CLDAP_PORT = 389
RECEIVE_TIMEOUT = 10
MAX_DATAGRAM = 65535

def decode_response(envelope, log=None):
    """Decode a CLDAP ping response datagram into a PingResponse."""
    payload = decode_envelope(envelope)

    if log:
        log.debug(f"NETLOGON payload: {payload.hex()}")

    return decode_netlogon(payload, log=log)

def ping(address, dns_name=None, port=CLDAP_PORT, timeout=RECEIVE_TIMEOUT, log=None):
    """
    Send a CLDAP ping to address:port over UDP and decode the answer.

    Socket failures and timeouts raise TransportError, anything wrong with
    the datagram itself raises one of the DecodeError subclasses.
    """
    request = encode_ping(dns_name)

    if log:
        log.debug(f"Sending {len(request)} byte CLDAP ping for '{dns_name or ''}' to {address}:{port}")

    try:
        with socket.socket(socket.AF_INET6 if ':' in address else socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.connect((address, port))

            sent = sock.send(request)
            if sent < len(request):
                raise TransportError(f"Unable to send entire CLDAP ping request, size={len(request)}")

            datagram = sock.recv(MAX_DATAGRAM)
    except socket.timeout as exc:
        raise TransportError(f"No CLDAP ping response from {address}:{port} within {timeout}s") from exc
    except OSError as exc:
        raise TransportError(f"Failed to send or receive CLDAP ping to {address}:{port}: {exc}") from exc

    if log:
        log.debug(f"Received {len(datagram)} byte response from {address}:{port}")

    return decode_response(datagram, log=log)

def main():

    parser = argparse.ArgumentParser(add_help=True, description='Send a CLDAP ping to a domain controller and show its NETLOGON information', formatter_class=argparse.RawDescriptionHelpFormatter)

    parser.add_argument('address', help="IP address of the server.")
    parser.add_argument('-d', '--dns-name', required=False, help="DNS name of a naming context. Defaults to an empty Host filter.", default=None)
    parser.add_argument('-p', '--port', required=False, type=int, help="UDP port of the server. Defaults to 389.", default=CLDAP_PORT)
    parser.add_argument('-t', '--timeout', required=False, type=float, help="Seconds to wait for the response. Defaults to 10.", default=RECEIVE_TIMEOUT)
    parser.add_argument('-v', '--verbose', action='store_true', help="Show debug output.")

    args = parser.parse_args()

    logging.basicConfig(handlers=[pwnlib.log.console])
    log = pwnlib.log.getLogger(__name__)
    log.setLevel(10 if args.verbose else 20)

    if pwnlib.term.can_init():
        pwnlib.term.init()
    log.term_mode = pwnlib.term.term_mode

    try:
        response = ping(args.address, args.dns_name, port=args.port, timeout=args.timeout, log=log)
    except CldapError as exc:
        log.failure(f"CLDAP ping to {args.address}:{args.port} failed: {exc}")
        if exc.__cause__ is not None:
            log.debug(f"Caused by: {exc.__cause__!r}")
        return 1

    log.success(f"{response.dnsHostName} answered")
    print(response, end='')
    return 0

if __name__ == '__main__':
    raise SystemExit(main())
