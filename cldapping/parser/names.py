from cldapping.errors import NameDecompressionError

# RFC 1035 4.1.4, as used by [MS-ADTS] 6.3.7
# pointers only carry an 8 bit offset, NETLOGON responses never get large enough to need more
POINTER_MASK = 0xc0

def _joinLabels(labels, start):
    # consecutive labels from start up to the first terminator
    chain = []
    for offset in labels:
        if offset < start:
            continue
        label = labels[offset]
        if label is None:
            break
        chain.append(label)
    return '.'.join(chain)

def decompress_names(region, base=0, log=None):
    """
    Expand the RFC 1035 compressed names in region.

    base is the offset of region within the message the pointers are relative
    to, a NETLOGON response points from the start of its header.

    Returns the list of names in the order they were terminated, and the
    offset -> label table built while scanning (None marks a terminator).
    A name that is not terminated by a zero byte or a pointer is dropped.
    """
    names = []
    labels = {}
    current = []

    end = len(region)
    i = 0
    while i < end:
        b = region[i]

        if b == 0:
            names.append('.'.join(current))
            current = []
            labels[base + i] = None
            i += 1

        elif b & POINTER_MASK == POINTER_MASK:
            if i + 1 >= end:
                raise NameDecompressionError(f"Bad encoding of RFC 1035 string pointer at offset {base + i}")

            ptr = region[i + 1]
            if labels.get(ptr) is None:
                raise NameDecompressionError(f"Bad encoding of value of RFC 1035 string pointer at offset {base + i} (0x{ptr:02x})")

            suffix = _joinLabels(labels, ptr)
            if log:
                log.debug(f"Resolved pointer at offset {base + i} to 0x{ptr:02x}: {suffix}")

            current.append(suffix)
            names.append('.'.join(current))
            current = []
            i += 2

        else:
            if i + 1 + b > end:
                raise NameDecompressionError(f"Bad encoding of RFC 1035 string label at offset {base + i} (length {b})")

            label = bytes(region[i + 1:i + 1 + b]).decode('utf-8', errors='replace')
            labels[base + i] = label
            current.append(label)
            i += 1 + b

    if current and log:
        log.debug(f"Dropping unterminated name: {'.'.join(current)}")

    return names, labels
