"""Built-in lookup services.

Grouped by category, in the order they are offered. ASN templates take the
bare number; templates that need the "AS" prefix carry it literally.
"""

from __future__ import annotations

from ..models import LookupService


def _svc(id: str, name: str, url_template: str, category, *, enabled: bool = True) -> LookupService:
    return LookupService(id=id, name=name, url_template=url_template, category=category, enabled=enabled)


def _ip_services() -> list[LookupService]:
    return [
        _svc("vt-ip", "VirusTotal", "https://www.virustotal.com/gui/ip-address/{value}/details", "ip"),
        _svc("otx-ip", "AlienVault OTX", "https://otx.alienvault.com/indicator/ip/{value}", "ip"),
        _svc("gn-ip", "GreyNoise", "https://viz.greynoise.io/ip/{value}", "ip"),
        _svc("abuse-ip", "AbuseIPDB", "https://www.abuseipdb.com/check/{value}", "ip"),
        _svc("ipinfo", "IPInfo", "https://ipinfo.io/{value}", "ip"),
        _svc("shodan", "Shodan", "https://www.shodan.io/host/{value}", "ip"),
        _svc("censys-ip", "Censys", "https://search.censys.io/hosts/{value}", "ip"),
        _svc("threat-crowd-ip", "ThreatCrowd", "https://threatcrowd.org/ip.php?ip={value}", "ip"),
        _svc(
            "cisco-talos-ip",
            "Cisco Talos",
            "https://talosintelligence.com/reputation_center/lookup?search={value}",
            "ip",
        ),
        _svc("ibm-xforce-ip", "IBM X-Force", "https://exchange.xforce.ibmcloud.com/ip/{value}", "ip"),
        _svc("pulsedive-ip", "Pulsedive", "https://pulsedive.com/indicator/?ioc={value}", "ip"),
        _svc("threathunter-ip", "ThreatHunter", "https://threathunter.io/ip/{value}", "ip", enabled=False),
        _svc("ipvoid", "IPVoid", "https://www.ipvoid.com/ip-blacklist-check/?ip={value}", "ip"),
        _svc("spamhaus-ip", "Spamhaus", "https://www.spamhaus.org/query/ip/{value}", "ip", enabled=False),
        _svc("threatminer-ip", "ThreatMiner", "https://www.threatminer.org/host.php?q={value}", "ip"),
    ]


def _domain_services() -> list[LookupService]:
    return [
        _svc("vt-domain", "VirusTotal", "https://www.virustotal.com/gui/domain/{value}/details", "domain"),
        _svc("otx-domain", "AlienVault OTX", "https://otx.alienvault.com/indicator/domain/{value}", "domain"),
        _svc("urlscan", "URLScan.io", "https://urlscan.io/search/#{value}", "domain"),
        _svc("gn-domain", "GreyNoise", "https://viz.greynoise.io/query/{value}", "domain"),
        _svc(
            "threat-crowd-domain",
            "ThreatCrowd",
            "https://threatcrowd.org/domain.php?domain={value}",
            "domain",
        ),
        _svc(
            "cisco-talos-domain",
            "Cisco Talos",
            "https://talosintelligence.com/reputation_center/lookup?search={value}",
            "domain",
        ),
        _svc("ibm-xforce-domain", "IBM X-Force", "https://exchange.xforce.ibmcloud.com/url/{value}", "domain"),
        _svc("pulsedive-domain", "Pulsedive", "https://pulsedive.com/indicator/?ioc={value}", "domain"),
        _svc("whois", "WHOIS Lookup", "https://who.is/whois/{value}", "domain"),
        _svc("threatminer-domain", "ThreatMiner", "https://www.threatminer.org/domain.php?q={value}", "domain"),
        _svc("securitytrails", "SecurityTrails", "https://securitytrails.com/domain/{value}/dns", "domain"),
    ]


def _sha256_services() -> list[LookupService]:
    return [
        _svc("vt-file", "VirusTotal", "https://www.virustotal.com/gui/file/{value}/details", "sha256"),
        _svc("malware-bazaar", "MalwareBazaar", "https://bazaar.abuse.ch/sample/{value}", "sha256"),
        _svc(
            "hybrid-analysis",
            "Hybrid Analysis",
            "https://www.hybrid-analysis.com/search?query={value}",
            "sha256",
        ),
        _svc("any-run", "ANY.RUN", "https://app.any.run/submissions/#filehash:{value}", "sha256"),
        _svc("joe-sandbox", "Joe Sandbox", "https://www.joesandbox.com/search?q={value}", "sha256", enabled=False),
        _svc(
            "reversing-labs",
            "ReversingLabs",
            "https://a1000.reversinglabs.com/accounts/login/?next=/search/v2/%3Fquery%3D{value}",
            "sha256",
            enabled=False,
        ),
        _svc(
            "metadefender",
            "MetaDefender",
            "https://metadefender.opswat.com/results/file/{value}/regular/overview",
            "sha256",
        ),
        _svc("threatminer-hash", "ThreatMiner", "https://www.threatminer.org/sample.php?q={value}", "sha256"),
        _svc("kaspersky-opentip", "Kaspersky Opentip", "https://opentip.kaspersky.com/{value}", "sha256"),
        _svc("intezer", "Intezer Analyze", "https://analyze.intezer.com/files/{value}", "sha256", enabled=False),
    ]


def _asn_services() -> list[LookupService]:
    return [
        _svc("ipinfo-asn", "IPInfo ASN", "https://ipinfo.io/AS{value}", "asn"),
        _svc("he-bgp", "Hurricane Electric BGP", "https://bgp.he.net/AS{value}", "asn"),
        _svc("bgpview", "BGPView", "https://bgpview.io/asn/{value}", "asn"),
        _svc("peeringdb", "PeeringDB", "https://www.peeringdb.com/asn/{value}", "asn"),
        _svc("ripe-asn", "RIPE Stat", "https://stat.ripe.net/AS{value}", "asn"),
        _svc("bgp-tools", "BGP.Tools", "https://bgp.tools/as/{value}", "asn"),
        _svc("robtex-asn", "Robtex ASN", "https://www.robtex.com/as/as{value}.html", "asn"),
        _svc(
            "ultratools-asn",
            "UltraTools ASN",
            "https://www.ultratools.com/tools/asnInfoResult?asn={value}",
            "asn",
            enabled=False,
        ),
    ]


def _mail_services() -> list[LookupService]:
    return [
        _svc(
            "mx-toolbox-mx",
            "MXToolbox MX",
            "https://mxtoolbox.com/SuperTool.aspx?action=mx%3a{value}#&run=toolpage",
            "mail",
        ),
        _svc(
            "mx-toolbox-spf",
            "MXToolbox SPF",
            "https://mxtoolbox.com/SuperTool.aspx?action=spf%3a{value}#&run=toolpage",
            "mail",
        ),
        _svc(
            "mx-toolbox-dmarc",
            "MXToolbox DMARC",
            "https://mxtoolbox.com/SuperTool.aspx?action=dmarc%3a{value}#&run=toolpage",
            "mail",
        ),
        _svc("dmarcian", "Dmarcian", "https://dmarcian.com/domain-checker/?domain={value}", "mail", enabled=False),
        _svc("hunter-email", "Hunter.io", "https://hunter.io/email-verifier/{value}", "mail", enabled=False),
    ]


def default_services() -> list[LookupService]:
    """Fresh copy of the built-in catalog (services are immutable, the list is not)."""
    return _ip_services() + _domain_services() + _sha256_services() + _asn_services() + _mail_services()
