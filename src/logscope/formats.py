"""Built-in catalog of log format descriptors.

The catalog is an ordered tuple, not a mapping: format detection walks it
front to back and keeps the first descriptor with the highest score, so the
position of an entry is its tie-break priority. Dialects whose lines are also
matched by a more general pattern (nginx access vs. Apache combined, Kubernetes
vs. Docker, auth.log vs. plain syslog) are listed before the general one.

Descriptors come in three closed variants:
- StructuredTextFormat: a regex whose capture groups map to ``fields``
- SemiStructuredFormat: one complete JSON object per line
- DelimitedFormat: separator-split columns
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class UnknownFormatError(ValueError):
    """Raised when a format id is not present in the catalog."""

    def __init__(self, format_id: str):
        self.format_id = format_id
        super().__init__(f'Unsupported format: {format_id}')


@dataclass(frozen=True)
class FormatDescriptor(ABC):
    """Fields shared by every catalog entry."""

    id: str
    name: str
    category: str
    sample: str = ''
    fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    @abstractmethod
    def kind(self) -> str:
        """Variant name: structured_text, semi_structured or delimited."""

    def to_dict(self) -> dict:
        """Listing metadata for a "supported formats" view."""
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'kind': self.kind,
            'sample': self.sample or 'Custom format',
            'fields': list(self.fields),
        }


@dataclass(frozen=True)
class StructuredTextFormat(FormatDescriptor):
    """Regex-based dialect; capture groups bind to ``fields`` by position."""

    pattern: re.Pattern | None = None

    @property
    def kind(self) -> str:
        return 'structured_text'

    def matches(self, line: str) -> bool:
        return self.pattern.match(line) is not None


@dataclass(frozen=True)
class SemiStructuredFormat(FormatDescriptor):
    """One self-describing JSON object per line."""

    @property
    def kind(self) -> str:
        return 'semi_structured'


@dataclass(frozen=True)
class DelimitedFormat(FormatDescriptor):
    """Separator-split columns. ``delimiter=None`` means detected at runtime."""

    delimiter: str | None = None

    DEFAULT_DELIMITER = ','

    @property
    def kind(self) -> str:
        return 'delimited'

    @property
    def effective_delimiter(self) -> str:
        return self.delimiter or self.DEFAULT_DELIMITER


# Timestamp fragments shared by several dialects
_SYSLOG_TS = r'(\w{3}\s+\d{1,2} \d{2}:\d{2}:\d{2})'
_ISO_Z_TS = r'(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z)'
_COMMA_MS_TS = r'(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d+)'

_AUTH_PROCESSES = (
    'sshd',
    'sudo',
    'su',
    'login',
    'passwd',
    'useradd',
    'userdel',
    'usermod',
    'groupadd',
    'chpasswd',
    'systemd-logind',
    'polkitd',
    'CRON',
    'cron',
)


FORMATS: tuple[FormatDescriptor, ...] = (
    # Web servers
    StructuredTextFormat(
        id='nginx_access',
        name='Nginx Access Log',
        category='web',
        pattern=re.compile(r'^(\S+) - (\S+) \[([^\]]+)\] "([^"]*)" (\d+) (\d+) "([^"]*)" "([^"]*)" "([^"]*)"'),
        fields=('ip', 'user', 'timestamp', 'request', 'status', 'size', 'referer', 'user_agent', 'forwarded_for'),
        sample=(
            '192.168.1.1 - user [10/Oct/2000:13:55:36 +0000] "GET /index.html HTTP/1.1" 200 612 '
            '"http://example.com" "Mozilla/5.0" "-"'
        ),
    ),
    StructuredTextFormat(
        id='apache_combined',
        name='Apache Combined Log Format',
        category='web',
        pattern=re.compile(r'^(\S+) \S+ (\S+) \[([^\]]+)\] "([^"]*)" (\d{3}) (\S+) "([^"]*)" "([^"]*)"'),
        fields=('ip', 'user', 'timestamp', 'request', 'status', 'size', 'referer', 'user_agent'),
        sample=(
            '127.0.0.1 - - [10/Oct/2000:13:55:36 -0700] "GET /index.html HTTP/1.0" 200 2326 '
            '"http://example.com" "Mozilla/5.0"'
        ),
    ),
    StructuredTextFormat(
        id='apache_common',
        name='Apache Common Log Format',
        category='web',
        pattern=re.compile(r'^(\S+) \S+ (\S+) \[([^\]]+)\] "([^"]*)" (\d{3}) (\S+)'),
        fields=('ip', 'user', 'timestamp', 'request', 'status', 'size'),
        sample='127.0.0.1 - - [10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif HTTP/1.0" 200 2326',
    ),
    StructuredTextFormat(
        id='apache_error',
        name='Apache Error Log',
        category='web',
        pattern=re.compile(
            r'^\[(\w{3} \w{3} \d{1,2} \d{2}:\d{2}:\d{2}(?:\.\d+)? \d{4})\] \[(?:(\w+):)?(\w+)\] '
            r'\[pid (\d+)(?::tid \d+)?\](?: \[client ([^\]\s]+?)(?::\d+)?\])? (.+)'
        ),
        fields=('timestamp', 'module', 'level', 'pid', 'ip', 'message'),
        sample=(
            '[Wed Oct 11 14:32:52.123456 2000] [core:error] [pid 1234] [client 192.168.1.1:56789] '
            'AH00037: Symbolic link not allowed or link target not accessible'
        ),
    ),
    StructuredTextFormat(
        id='nginx_error',
        name='Nginx Error Log',
        category='web',
        pattern=re.compile(r'^(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}) \[(\w+)\] (\d+)#(\d+): (.+)'),
        fields=('timestamp', 'level', 'pid', 'tid', 'message'),
        sample='2023/10/25 10:15:30 [error] 1234#0: *567 connect() failed (111: Connection refused)',
    ),
    StructuredTextFormat(
        id='iis',
        name='IIS W3C Extended Log',
        category='web',
        pattern=re.compile(
            r'^(\d{4}-\d{2}-\d{2}) (\d{2}:\d{2}:\d{2}) (\S+) ([A-Z]+) (\S+) (\S+) (\d+) (\S+) (\S+) (\S+) '
            r'(\d{3}) (\d+) (\d+) (\d+)$'
        ),
        fields=(
            'date',
            'time',
            'server_ip',
            'method',
            'uri',
            'query',
            'port',
            'username',
            'client_ip',
            'user_agent',
            'status',
            'substatus',
            'win32_status',
            'time_taken',
        ),
        sample='2023-10-25 10:15:30 192.168.1.100 GET /default.htm - 80 - 192.168.1.1 Mozilla/4.0 200 0 0 3330',
    ),
    StructuredTextFormat(
        id='haproxy',
        name='HAProxy HTTP Log',
        category='web',
        pattern=re.compile(
            r'^' + _SYSLOG_TS + r' (\S+) haproxy\[(\d+)\]: ([\d.]+):(\d+) \[([^\]]+)\] (\S+) (\S+) (\S+) '
            r'(\d{3}) (\d+) .*?"([^"]*)"'
        ),
        fields=(
            'syslog_timestamp',
            'hostname',
            'pid',
            'ip',
            'client_port',
            'timestamp',
            'frontend',
            'backend',
            'timers',
            'status',
            'size',
            'request',
        ),
        sample=(
            'Oct 25 10:15:30 lb01 haproxy[1234]: 192.168.1.10:51234 [25/Oct/2023:10:15:30.123] http-in '
            'web/web1 0/0/1/2/3 200 512 - - ---- 1/1/0/0/0 0/0 "GET /index.html HTTP/1.1"'
        ),
    ),
    # System logs
    StructuredTextFormat(
        id='auth_log',
        name='Linux Auth Log',
        category='security',
        pattern=re.compile(
            r'^' + _SYSLOG_TS + r' (\S+) (' + '|'.join(re.escape(p) for p in _AUTH_PROCESSES) + r')(?:\[(\d+)\])?: (.+)'
        ),
        fields=('timestamp', 'hostname', 'process', 'pid', 'message'),
        sample='Oct 25 10:15:30 server01 sshd[1234]: Failed password for root from 192.168.1.100 port 22 ssh2',
    ),
    StructuredTextFormat(
        id='systemd',
        name='Systemd Journal',
        category='system',
        pattern=re.compile(r'^' + _SYSLOG_TS + r' (\S+) (systemd(?:-[\w-]+)?|[\w@.-]+\.service)\[(\d+)\]: (.+)'),
        fields=('timestamp', 'hostname', 'unit', 'pid', 'message'),
        sample='Oct 25 10:15:30 server01 systemd[1]: Started Apache HTTP Server.',
    ),
    StructuredTextFormat(
        id='syslog',
        name='Standard Syslog',
        category='system',
        pattern=re.compile(r'^' + _SYSLOG_TS + r' (\S+) ([^\s\[:]+)(?:\[(\d+)\])?: (.*)'),
        fields=('timestamp', 'hostname', 'process', 'pid', 'message'),
        sample='Oct 25 10:15:30 server01 kernel: [12345.678901] eth0: link up, 1000Mbps, full-duplex',
    ),
    StructuredTextFormat(
        id='rsyslog',
        name='Rsyslog with facility/severity',
        category='system',
        pattern=re.compile(
            r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+[+-]\d{2}:\d{2}) (\S+) (\d+) (\d) (\S+) (.+)'
        ),
        fields=('timestamp', 'hostname', 'facility', 'severity', 'process', 'message'),
        sample='2023-10-25T10:15:30.123+00:00 server01 16 6 sshd Accepted password for user',
    ),
    # Structured logs
    SemiStructuredFormat(
        id='json_logs',
        name='JSON Log Format',
        category='structured',
        fields=('json_data',),
        sample='{"timestamp":"2023-10-25T10:15:30Z","level":"info","message":"User logged in","user_id":123}',
    ),
    SemiStructuredFormat(
        id='logstash',
        name='Logstash JSON Format',
        category='structured',
        fields=('json_data',),
        sample='{"@timestamp":"2023-10-25T10:15:30.123Z","@version":"1","level":"INFO","message":"Processing request"}',
    ),
    # Containers
    StructuredTextFormat(
        id='kubernetes',
        name='Kubernetes Pod Logs (CRI)',
        category='container',
        pattern=re.compile(
            r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})) (stdout|stderr) ([FP]) (.*)'
        ),
        fields=('timestamp', 'stream', 'tag', 'message'),
        sample='2023-10-25T10:15:30.123456789Z stderr F [ERROR] Application failed to start',
    ),
    # Databases
    StructuredTextFormat(
        id='mysql_error',
        name='MySQL Error Log',
        category='database',
        pattern=re.compile(r'^' + _ISO_Z_TS + r' (\d+) \[(\w+)\] (?:\[([\w-]+)\] )?(?:\[(\w+)\] )?(.+)'),
        fields=('timestamp', 'thread_id', 'level', 'error_code', 'subsystem', 'message'),
        sample='2023-10-25T10:15:30.123456Z 0 [Warning] [MY-010068] [Server] CA certificate ca.pem is self signed.',
    ),
    StructuredTextFormat(
        id='docker',
        name='Docker Container Logs',
        category='container',
        pattern=re.compile(r'^' + _ISO_Z_TS + r' (.+)'),
        fields=('timestamp', 'message'),
        sample='2023-10-25T10:15:30.123456789Z This is a log message from container',
    ),
    StructuredTextFormat(
        id='postgresql',
        name='PostgreSQL Log',
        category='database',
        pattern=re.compile(
            r'^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}(?:\.\d+)? [A-Z]{2,5}) \[(\d+)\](?: [^\s:]+)? ([A-Z]+):\s+(.+)'
        ),
        fields=('timestamp', 'pid', 'level', 'message'),
        sample='2023-10-25 10:15:30.123 UTC [1234] LOG:  database system is ready to accept connections',
    ),
    StructuredTextFormat(
        id='redis',
        name='Redis Server Log',
        category='database',
        pattern=re.compile(r'^(\d+):([XCSM]) (\d{1,2} \w{3} \d{4} \d{2}:\d{2}:\d{2}(?:\.\d+)?) ([.\-*#]) (.+)'),
        fields=('pid', 'role', 'timestamp', 'level', 'message'),
        sample='1234:M 25 Oct 2023 10:15:30.123 * Ready to accept connections tcp',
    ),
    # Security
    StructuredTextFormat(
        id='fail2ban',
        name='Fail2ban Log',
        category='security',
        pattern=re.compile(r'^' + _COMMA_MS_TS + r' (fail2ban\.[\w.]+)\s+\[(\d+)\]: (\w+)\s+(?:\[([\w-]+)\] )?(.+)'),
        fields=('timestamp', 'logger', 'pid', 'level', 'jail', 'message'),
        sample='2023-10-25 10:15:30,123 fail2ban.actions        [1234]: NOTICE  [sshd] Ban 192.168.1.100',
    ),
    StructuredTextFormat(
        id='suricata_fast',
        name='Suricata/Snort Fast Alert Log',
        category='security',
        pattern=re.compile(
            r'^(\d{2}/\d{2}/\d{4}-\d{2}:\d{2}:\d{2}\.\d+)\s+\[\*\*\] \[(\d+:\d+:\d+)\] (.+?) \[\*\*\] '
            r'(?:\[Classification: ([^\]]*)\] )?\[Priority: (\d+)\] \{(\w+)\} '
            r'([\d.]+)(?::(\d+))? -> ([\d.]+)(?::(\d+))?'
        ),
        fields=(
            'timestamp',
            'signature_id',
            'message',
            'classification',
            'priority',
            'protocol',
            'ip',
            'src_port',
            'dest_ip',
            'dest_port',
        ),
        sample=(
            '10/25/2023-10:15:30.123456  [**] [1:2010935:3] ET SCAN Suspicious inbound to MSSQL port 1433 [**] '
            '[Classification: Potentially Bad Traffic] [Priority: 2] {TCP} 203.0.113.5:51234 -> 192.168.1.10:1433'
        ),
    ),
    # Application frameworks
    StructuredTextFormat(
        id='spring_boot',
        name='Spring Boot Application Log',
        category='application',
        pattern=re.compile(
            r'^(\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}\.\d+(?:Z|[+-]\d{2}:?\d{2})?)\s+(\w+) (\d+) --- '
            r'\[\s*(.+?)\] (\S+?)\s*: (.*)'
        ),
        fields=('timestamp', 'level', 'pid', 'thread', 'logger', 'message'),
        sample=(
            '2023-10-25 10:15:30.123  INFO 1234 --- [           main] com.example.Application                  '
            ': Started Application in 2.3 seconds'
        ),
    ),
    StructuredTextFormat(
        id='java_log4j',
        name='Java Log4j Format',
        category='application',
        pattern=re.compile(r'^' + _COMMA_MS_TS + r' (\w+)\s+\[(.+?)\] (\S+) - (.*)'),
        fields=('timestamp', 'level', 'thread', 'logger', 'message'),
        sample='2023-10-25 10:15:30,123 INFO [main] com.example.Service - Processing request',
    ),
    StructuredTextFormat(
        id='python_logging',
        name='Python logging Format',
        category='application',
        pattern=re.compile(r'^' + _COMMA_MS_TS + r' - (\S+) - (\w+) - (.*)'),
        fields=('timestamp', 'logger', 'level', 'message'),
        sample='2023-10-25 10:15:30,123 - app.worker - ERROR - Task 42 failed: connection timeout',
    ),
    # Generic fallback; the delimiter is inferred by the detector
    DelimitedFormat(
        id='custom_delimiter',
        name='Custom Delimited Format',
        category='custom',
    ),
)

_FORMATS_BY_ID: dict[str, FormatDescriptor] = {fmt.id: fmt for fmt in FORMATS}

DELIMITED_FORMAT_ID = 'custom_delimiter'


def get_format(format_id: str) -> FormatDescriptor:
    """Look up a descriptor by id.

    Raises:
        UnknownFormatError: If the id is not in the catalog.
    """
    try:
        return _FORMATS_BY_ID[format_id]
    except KeyError:
        raise UnknownFormatError(format_id) from None


def list_formats() -> list[dict]:
    """Return listing metadata for every catalog entry, in priority order."""
    return [fmt.to_dict() for fmt in FORMATS]
