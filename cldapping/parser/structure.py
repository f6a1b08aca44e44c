from dissect.cstruct import cstruct

# NETLOGON_SAM_LOGON_RESPONSE_EX, see [MS-ADTS] 6.3.1.9
# the RFC 1035 compressed names sit between the header and the footer
structure = cstruct()
structure.load("""
    struct DOMAIN_GUID {
        uint32 Data1;
        uint16 Data2;
        uint16 Data3;
        char Data4[8];
    };

    struct NETLOGON_SAM_LOGON_RESPONSE_EX_HEADER {
        uint16 Opcode;
        uint16 Sbz;
        uint32 Flags;
        DOMAIN_GUID DomainGuid;
    };

    struct NETLOGON_SAM_LOGON_RESPONSE_EX_FOOTER {
        uint32 NtVersion;   // NETLOGON_NT_VERSION_* bits
        uint16 LmNtToken;   // 0xFFFF
        uint16 Lm20Token;   // 0xFFFF
    };
""", compiled=True)

HEADER_SIZE = len(structure.NETLOGON_SAM_LOGON_RESPONSE_EX_HEADER)
FOOTER_SIZE = len(structure.NETLOGON_SAM_LOGON_RESPONSE_EX_FOOTER)
