"""One acquisition pass -> three immutable record lists."""
import socket
from collections import namedtuple

from .acquisition import AcquisitionError
from .debuglog import debug_log


ConnectionRecord = namedtuple("ConnectionRecord", "proto local remote state pid process")
PortRecord = namedtuple("PortRecord", "port proto addr pid process")
InterfaceRecord = namedtuple("InterfaceRecord", "name up addrs rx tx")
Snapshot = namedtuple("Snapshot", "connections ports interfaces")

EMPTY_SNAPSHOT = Snapshot((), (), ())

LISTEN = "LISTEN"
WILDCARD = "*"
WILDCARD_ADDRS = ("", "0.0.0.0", "::")

UDP_TYPE = int(socket.SOCK_DGRAM)
# AF_INET6 is 10 on Linux, 23 on Windows, 30 on macOS
IPV6_FAMILIES = {int(socket.AF_INET6), 10, 23}


def proto_label(conn_type, family):
    proto = "udp" if conn_type == UDP_TYPE else "tcp"
    if family in IPV6_FAMILIES:
        proto += "6"
    return proto


def format_addr(ip, port):
    return f"{ip or WILDCARD}:{port}"


def bind_addr(ip):
    return WILDCARD if ip in WILDCARD_ADDRS else ip


def lookup_process_name(acquisition, pid, cache):
    """Resolve a pid through a pass-local cache; failures resolve to ''."""
    if pid in cache:
        return cache[pid]
    try:
        name = acquisition.process_name(pid) or ""
    except AcquisitionError as e:
        debug_log(f"NORMALIZE: {e}")
        name = ""
    cache[pid] = name
    return name


def build_connections(raw, acquisition, names):
    result = []
    for c in raw:
        if not c.status:
            continue
        pid = c.pid or 0
        result.append(ConnectionRecord(
            proto=proto_label(c.type, c.family),
            local=format_addr(c.laddr_ip, c.laddr_port),
            remote=format_addr(c.raddr_ip, c.raddr_port),
            state=c.status,
            pid=pid,
            process=lookup_process_name(acquisition, pid, names) if pid > 0 else "",
        ))
    return tuple(result)


def build_ports(raw, acquisition, names):
    seen = set()  # (port, proto)
    result = []
    for c in raw:
        if c.status != LISTEN:
            continue
        proto = proto_label(c.type, c.family)
        key = (c.laddr_port, proto)
        if key in seen:
            continue
        seen.add(key)
        pid = c.pid or 0
        result.append(PortRecord(
            port=c.laddr_port,
            proto=proto,
            addr=bind_addr(c.laddr_ip),
            pid=pid,
            process=lookup_process_name(acquisition, pid, names) if pid > 0 else "",
        ))
    result.sort(key=lambda p: p.port)
    return tuple(result)


def build_interfaces(raw, counters):
    io = {c.name: c for c in counters}
    result = []
    for ifc in raw:
        if ifc.loopback:
            continue
        c = io.get(ifc.name)
        result.append(InterfaceRecord(
            name=ifc.name,
            up=bool(ifc.up),
            addrs=tuple(ifc.addrs),
            rx=c.bytes_recv if c else 0,
            tx=c.bytes_sent if c else 0,
        ))
    return tuple(result)


def normalize(acquisition):
    """Run one pass against ``acquisition`` and return a ``Snapshot``.

    Each data source fails on its own: a failing connection query leaves the
    connection and port lists empty but still reports interfaces, and the
    other way round. A failing counter query only zeroes the counters.
    """
    # pid -> name, lives for this pass only
    names = {}

    try:
        raw_conns = acquisition.connections("all")
    except AcquisitionError as e:
        debug_log(f"NORMALIZE: connections unavailable: {e}")
        raw_conns = []
    connections = build_connections(raw_conns, acquisition, names)
    ports = build_ports(raw_conns, acquisition, names)

    try:
        raw_ifaces = acquisition.interfaces()
    except AcquisitionError as e:
        debug_log(f"NORMALIZE: interfaces unavailable: {e}")
        raw_ifaces = []
    try:
        counters = acquisition.io_counters() if raw_ifaces else []
    except AcquisitionError as e:
        debug_log(f"NORMALIZE: io counters unavailable: {e}")
        counters = []
    interfaces = build_interfaces(raw_ifaces, counters)

    return Snapshot(connections, ports, interfaces)
