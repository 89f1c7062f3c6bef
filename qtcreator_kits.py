import io
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

PROFILES_XML = Path('QtProject') / 'qtcreator' / 'profiles.xml'

# XML declaration, doctype and the "Written by QtCreator" comment
PROLOG_LINES = 3

PROFILE_VARIABLE_PREFIX = 'Profile.'
KIT_ID_KEY = 'PE.Profile.Id'
KIT_NAME_KEY = 'PE.Profile.Name'


@dataclass
class KitFound:
    kit_id: str


@dataclass
class KitNotFound:
    available: list = field(default_factory=list)


@dataclass
class KitParseError:
    message: str
    line: int = -1


def settings_directory(environ):
    """
    Get the per-user directory Qt Creator keeps its settings under.

    APPDATA (the roaming profile) on Windows; XDG_CONFIG_HOME or ~/.config
    elsewhere. Returns None when none of them is set.
    """
    for var in ('APPDATA', 'XDG_CONFIG_HOME'):
        value = environ.get(var)
        if value:
            return Path(value)

    home = environ.get('HOME')
    if home:
        return Path(home) / '.config'
    return None


def profiles_xml_path(environ):
    """Path of Qt Creator's profiles.xml, or None if no settings directory is known"""
    root = settings_directory(environ)
    if root is None:
        return None
    return root / PROFILES_XML


def load_profiles_text(path):
    """Read profiles.xml without its first PROLOG_LINES lines"""
    with open(path, 'r', encoding='utf-8') as f:
        lines = f.read().splitlines()

    # The prolog is dropped unconditionally, whatever it contains
    return '\n'.join(lines[PROLOG_LINES:])


def _value_text(valuemap, key):
    value = valuemap.find(f"value[@key='{key}']")
    if value is None or value.text is None:
        return ''
    return value.text.strip()


class KitCollector:
    """
    Looks for one kit by name among the Profile.N blocks of profiles.xml.

    Only the direct children of a profile's valuemap are read, so keys of
    nested value maps never shadow the kit's own id and name.
    """

    def __init__(self, kit_name):
        self.kit_name = kit_name
        self.kits = []
        self.kit_id = None

    def feed_event(self, event, elem):
        """Handle one 'end' event; returns True once the kit has been found"""
        if event != 'end' or elem.tag != 'data':
            return False

        variable = elem.find('variable')
        valuemap = elem.find('valuemap')
        found = False

        if (variable is not None and valuemap is not None
                and (variable.text or '').startswith(PROFILE_VARIABLE_PREFIX)):
            kit_id = _value_text(valuemap, KIT_ID_KEY)
            name = _value_text(valuemap, KIT_NAME_KEY)
            self.kits.append((kit_id, name))

            if name == self.kit_name and kit_id:
                self.kit_id = kit_id
                found = True

        elem.clear()
        return found

    def scan(self, text, line_offset=PROLOG_LINES):
        """
        Scan profiles.xml text, stopping at the first matching kit.

        line_offset is added to parse error lines so they point into the
        file the text was loaded from.
        """
        try:
            for event, elem in ET.iterparse(io.StringIO(text), events=('end',)):
                if self.feed_event(event, elem):
                    return KitFound(self.kit_id)
        except ET.ParseError as e:
            line = e.position[0] + line_offset if e.position else -1
            return KitParseError(str(e), line)

        return KitNotFound([name for _, name in self.kits])


def find_kit(text, kit_name, line_offset=PROLOG_LINES):
    """Find the id of the kit called kit_name in profiles.xml text"""
    return KitCollector(kit_name).scan(text, line_offset)


def lookup_kit(kit_name, environ):
    """
    Locate profiles.xml for the current user and look up kit_name in it.

    Returns (path, result) where result is None when the file does not exist
    and was therefore never parsed.
    """
    path = profiles_xml_path(environ)
    if path is None or not path.is_file():
        return path, None

    text = load_profiles_text(path)
    result = find_kit(text, kit_name)
    logger.debug('Scanned %s for kit %r: %s', path, kit_name, type(result).__name__)
    return path, result
