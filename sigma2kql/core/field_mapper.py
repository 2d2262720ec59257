"""
ECS Field Mapping

Maps Sigma field names to Elastic Common Schema (ECS) field paths.
Lookups are case-insensitive; names missing from the table pass through
unchanged so custom fields still reach the generated query.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional


def get_ecs_mappings() -> Dict[str, str]:
    """
    Returns the Sigma to ECS field mappings, grouped by domain.

    Keys are lowercase. Target names are added as identity entries by
    `_build_ecs_table`.
    """
    return {
        # Process
        'processid': 'process.pid',
        'image': 'process.executable',
        'description': 'process.title',
        'commandline': 'process.command_line',
        'currentdirectory': 'process.working_directory',
        'user': 'user.name',
        'username': 'user.name',
        'integritylevel': 'process.integrity_level',
        'logonid': 'process.logon_id',
        'parentprocessid': 'process.parent.pid',
        'parentimage': 'process.parent.executable',
        'parentcommandline': 'process.parent.command_line',
        'originalfilename': 'process.pe.original_file_name',

        # File
        'filename': 'file.name',
        'targetfilename': 'file.path',
        'directory': 'file.directory',
        'sourcefilename': 'source.file.path',
        'hashes': 'file.hash.*',
        'imphash': 'file.pe.imphash',
        'md5': 'file.hash.md5',
        'sha1': 'file.hash.sha1',
        'sha256': 'file.hash.sha256',

        # Network
        'sourceip': 'source.ip',
        'src_ip': 'source.ip',
        'destinationip': 'destination.ip',
        'dst_ip': 'destination.ip',
        'sourceport': 'source.port',
        'src_port': 'source.port',
        'destinationport': 'destination.port',
        'dst_port': 'destination.port',
        'destinationhostname': 'destination.domain',
        'protocol': 'network.protocol',
        'url': 'url.full',
        'http_method': 'http.request.method',
        'user_agent': 'user_agent.original',
        'useragent': 'user_agent.original',

        # Registry
        'targetobject': 'registry.path',
        'details': 'registry.data.strings',
        'newname': 'registry.value',

        # Windows events / host
        'eventid': 'winlog.event_id',
        'provider_name': 'winlog.provider_name',
        'channel': 'winlog.channel',
        'computer': 'host.name',
        'computername': 'host.name',
        'hostname': 'host.name',
        'task': 'winlog.task',
        'opcode': 'winlog.opcode',
        'service': 'service.name',
        'servicename': 'service.name',
        'servicefilename': 'service.executable',
        'failurecode': 'winlog.event_data.FailureCode',
        'samaccountname': 'user.name',
        'ipaddress': 'source.ip',
        'workstationname': 'source.domain',
        'sharename': 'network.share.name',
        'objectname': 'file.path',
        'accessmask': 'winlog.event_data.AccessMask',
        'subjectlogonid': 'winlog.event_data.SubjectLogonId',
        'subjectusername': 'user.name',
        'subjectdomainname': 'user.domain',
        'targetusername': 'user.target.name',
        'logontype': 'winlog.event_data.LogonType',

        # Cloud
        'aws.region': 'cloud.region',
        'useridentity.arn': 'cloud.account.id',
        'sourceipaddress': 'source.ip',
        'useridentity.username': 'user.name',
        'eventname': 'event.action',
        'eventsource': 'event.provider',

        # Generic
        'rulename': 'rule.name',
        'pipe': 'file.path',
        'pipename': 'file.path',
        'queryname': 'dns.question.name',
        'queryresults': 'dns.answers.data',
    }


def _build_ecs_table() -> Mapping[str, str]:
    table = get_ecs_mappings()
    for target in list(table.values()):
        table.setdefault(target.lower(), target)
    return MappingProxyType(table)


# Built once at import, shared read-only.
ECS_FIELD_MAP: Mapping[str, str] = _build_ecs_table()


def resolve(name: str) -> str:
    """
    Resolve a Sigma field name to its ECS field path.

    Example: 'Image' → 'process.executable', 'CustomField' → 'CustomField'
    """
    return ECS_FIELD_MAP.get(name.strip().lower(), name.strip())


class FieldMapper:
    """
    Field name resolution against the ECS table, with optional overrides.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        if overrides:
            table = dict(ECS_FIELD_MAP)
            table.update({key.lower(): value for key, value in overrides.items()})
            self.table = MappingProxyType(table)
        else:
            self.table = ECS_FIELD_MAP

    def resolve(self, name: str) -> str:
        """Resolve field name, identity fallback for unknown names"""
        return self.table.get(name.strip().lower(), name.strip())
