"""Host data sources for the dashboard.

Everything that touches the live host goes through an ``Acquisition``. The
normalizer only ever sees the raw tuples defined here, so tests can hand it a
fake source and the psutil calls stay in one place.
"""
import abc
import ipaddress
import socket
from collections import namedtuple

import psutil


RawConnection = namedtuple(
    "RawConnection",
    "type family laddr_ip laddr_port raddr_ip raddr_port status pid",
)
RawInterface = namedtuple("RawInterface", "name up loopback addrs")
RawCounter = namedtuple("RawCounter", "name bytes_recv bytes_sent")


class AcquisitionError(Exception):
    """A host query could not be answered (permission, vanished process, OS error)."""


class Acquisition(abc.ABC):
    """Read-only view of the host's sockets, processes and interfaces."""

    @abc.abstractmethod
    def connections(self, kind="all"):
        """Return a list of ``RawConnection``."""

    @abc.abstractmethod
    def process_name(self, pid):
        """Return the display name of ``pid``."""

    @abc.abstractmethod
    def interfaces(self):
        """Return a list of ``RawInterface``."""

    @abc.abstractmethod
    def io_counters(self):
        """Return a list of ``RawCounter``, one per interface."""


# --------------------------------------------------
# psutil backend
# --------------------------------------------------
# psutil's "all" also lists unix domain sockets, which have no address family
# we can label or port we can show.
_PSUTIL_KINDS = {"all": "inet"}


def _endpoint(addr):
    """psutil gives an (ip, port) namedtuple, or an empty tuple when unbound."""
    if not addr:
        return "", 0
    return addr.ip or "", int(addr.port or 0)


def _cidr(address, netmask):
    # link-local v6 addresses carry a zone suffix, e.g. fe80::1%eth0
    address = address.split("%", 1)[0]
    if not netmask:
        return address
    try:
        prefix = bin(int(ipaddress.ip_address(netmask))).count("1")
    except ValueError:
        return address
    return f"{address}/{prefix}"


def _is_loopback(stats, addrs):
    flags = getattr(stats, "flags", "") if stats is not None else ""
    if flags:
        return "loopback" in flags.split(",")
    # older psutil releases don't expose flags
    for a in addrs:
        try:
            if ipaddress.ip_address(a.split("/", 1)[0]).is_loopback:
                return True
        except ValueError:
            continue
    return False


class PsutilAcquisition(Acquisition):
    """Acquisition backed by psutil."""

    def connections(self, kind="all"):
        try:
            conns = psutil.net_connections(kind=_PSUTIL_KINDS.get(kind, kind))
        except (psutil.Error, OSError) as e:
            raise AcquisitionError(f"net_connections: {e}") from e

        result = []
        for c in conns:
            l_ip, l_port = _endpoint(c.laddr)
            r_ip, r_port = _endpoint(c.raddr)
            result.append(RawConnection(
                type=int(c.type),
                family=int(c.family),
                laddr_ip=l_ip,
                laddr_port=l_port,
                raddr_ip=r_ip,
                raddr_port=r_port,
                status=c.status or "",
                pid=c.pid or 0,
            ))
        return result

    def process_name(self, pid):
        try:
            return psutil.Process(pid).name()
        except (psutil.Error, OSError) as e:
            raise AcquisitionError(f"process {pid}: {e}") from e

    def interfaces(self):
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except (psutil.Error, OSError) as e:
            raise AcquisitionError(f"net_if_stats: {e}") from e

        result = []
        names = list(stats)
        names.extend(n for n in addrs if n not in stats)
        for name in names:
            st = stats.get(name)
            bound = [
                _cidr(a.address, a.netmask)
                for a in addrs.get(name, [])
                if a.family in (socket.AF_INET, socket.AF_INET6)
            ]
            result.append(RawInterface(
                name=name,
                up=bool(st.isup) if st is not None else False,
                loopback=_is_loopback(st, bound),
                addrs=bound,
            ))
        return result

    def io_counters(self):
        try:
            counters = psutil.net_io_counters(pernic=True)
        except (psutil.Error, OSError) as e:
            raise AcquisitionError(f"net_io_counters: {e}") from e
        return [
            RawCounter(name, io.bytes_recv, io.bytes_sent)
            for name, io in counters.items()
        ]
