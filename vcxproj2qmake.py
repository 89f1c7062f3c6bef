import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CONTINUATION_MARKER = ' \\'
LIST_SEPARATOR = ';'

PRO_HEADER = [
    'TEMPLATE = app',
    '',
    'CONFIG += console c++11',
    'CONFIG -= app_bundle qt',
    '',
    'include(defines.pri)',
    'include(includes.pri)',
    '',
]

PRI_BANNER = [
    '######################################################################',
    '########## This file has been generated by CuteCodeAccess ############',
    '######################################################################',
]

DEFINES_PRI = 'defines.pri'
INCLUDES_PRI = 'includes.pri'

# Elements whose text is appended to one of the ';' joined lists
DEFINE_TAGS = ('NMakePreprocessorDefinitions',)
INCLUDE_TAGS = ('NMakeIncludeSearchPath', 'IncludePath')


class EmptyListError(ValueError):
    """Raised when a list block would be generated from no items"""


@dataclass
class XmlError:
    message: str
    line: int = -1


@dataclass
class CollectedLists:
    """Values collected from one vcxproj, in document order"""
    headers: list = field(default_factory=list)
    sources: list = field(default_factory=list)
    defines: str = ''
    includes: str = ''

    def define_list(self):
        return split_list(self.defines)

    def include_list(self):
        return split_list(self.includes)


@dataclass
class GeneratedFile:
    path: Path
    lines: list

    def write(self):
        """Write all lines at once, replacing any previous content"""
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(self.lines))
            f.write('\n')
        return self.path


def split_list(value, separator=LIST_SEPARATOR):
    """Split a delimited string, dropping empty segments"""
    return [item for item in value.split(separator) if item]


def local_name(tag):
    """Strip the '{namespace}' prefix ElementTree puts on tags"""
    if isinstance(tag, str) and tag.startswith('{'):
        return tag.rsplit('}', 1)[1]
    return tag


def _append_delimited(current, value):
    if not current:
        return value
    return f'{current}{LIST_SEPARATOR}{value}'


class VcxprojCollector:
    """
    Collects headers, sources, defines and include paths from parse events.

    The document is read once from top to bottom. Item attributes are taken
    on 'start' events, element text on 'end' events; anything not listed
    below is ignored:

        ClInclude Include=...             -> headers
        ClCompile Include=...             -> sources
        NMakePreprocessorDefinitions      -> defines
        NMakeIncludeSearchPath/IncludePath -> includes
    """

    def __init__(self):
        self.lists = CollectedLists()

    def feed_event(self, event, elem):
        tag = local_name(elem.tag)

        if event == 'start':
            include = elem.get('Include')
            if include:
                if tag == 'ClInclude':
                    self.lists.headers.append(include)
                elif tag == 'ClCompile':
                    self.lists.sources.append(include)
            return

        text = (elem.text or '').strip()
        if text:
            if tag in DEFINE_TAGS:
                self.lists.defines = _append_delimited(self.lists.defines, text)
            elif tag in INCLUDE_TAGS:
                self.lists.includes = _append_delimited(self.lists.includes, text)

        # Children were already handled on their own 'end' events
        elem.clear()

    def scan(self, source):
        """
        Scan a vcxproj path or file object.

        Returns None on success, or an XmlError when the document is
        malformed. Values seen before the error stay collected.
        """
        try:
            for event, elem in ET.iterparse(source, events=('start', 'end')):
                self.feed_event(event, elem)
        except ET.ParseError as e:
            line = e.position[0] if e.position else -1
            return XmlError(str(e), line)
        return None


def scan_vcxproj(vcxproj_path):
    """Scan a vcxproj file, returning (CollectedLists, XmlError or None)"""
    collector = VcxprojCollector()
    try:
        error = collector.scan(str(vcxproj_path))
    except OSError as e:
        error = XmlError(f'Could not read {vcxproj_path}: {e.strerror or e}')
    return collector.lists, error


def format_continued_list(items, template='{0}', marker=CONTINUATION_MARKER):
    """
    Render items as a qmake line-continued block.

    Every item except the last gets the continuation marker appended.

    Args:
        items: Values to render, in order
        template: str.format template applied to each item ('{0}' or '"{0}"')
        marker: Continuation marker appended to all but the last line

    Raises:
        EmptyListError: if items is empty
    """
    if not items:
        raise EmptyListError('cannot format an empty list')

    lines = [template.format(item) + marker for item in items[:-1]]
    lines.append(template.format(items[-1]))
    return lines


def build_pro_file(pro_path, lists):
    """Build the <project>.pro GeneratedFile from collected headers and sources"""
    lines = list(PRO_HEADER)

    lines.append('HEADERS +=' + CONTINUATION_MARKER)
    lines.extend(format_continued_list(lists.headers))

    lines.append('')

    lines.append('SOURCES +=' + CONTINUATION_MARKER)
    lines.extend(format_continued_list(lists.sources))

    return GeneratedFile(Path(pro_path), lines)


def build_pri_file(pri_path, variable, values):
    """Build a generated .pri file assigning quoted values to a qmake variable"""
    lines = list(PRI_BANNER)
    lines.append(f'{variable} +=' + CONTINUATION_MARKER)
    lines.extend(format_continued_list(values, '"{0}"'))
    return GeneratedFile(Path(pri_path), lines)


def write_pro_file(lists, output_dir, project_name, source_name=''):
    """
    Generate and write <project_name>.pro into output_dir.

    Returns the written path, or None when the file could not be generated
    (the reason is logged).
    """
    pro_path = Path(output_dir) / f'{project_name}.pro'

    try:
        generated = build_pro_file(pro_path, lists)
    except EmptyListError:
        missing = 'headers' if not lists.headers else 'sources'
        logger.error('No %s found in %s, skipping %s', missing, source_name or project_name, pro_path.name)
        return None

    try:
        return generated.write()
    except OSError as e:
        logger.error('Could not write %s: %s', pro_path, e)
        return None


def write_pri_files(lists, output_dir, source_name=''):
    """
    Generate and write defines.pri and includes.pri into output_dir.

    The two files are independent: a failure on one is logged and does not
    stop the other. Returns the list of written paths.
    """
    written = []
    output_dir = Path(output_dir)

    for file_name, variable, what, values in (
        (DEFINES_PRI, 'DEFINES', 'preprocessor defines', lists.define_list()),
        (INCLUDES_PRI, 'INCLUDEPATH', 'include paths', lists.include_list()),
    ):
        pri_path = output_dir / file_name
        try:
            written.append(build_pri_file(pri_path, variable, values).write())
        except EmptyListError:
            logger.error('No %s found in %s, skipping %s', what, source_name or 'project', file_name)
        except OSError as e:
            logger.error('Could not write %s: %s', pri_path, e)

    return written


def convert_vcxproj(vcxproj_path, output_dir=None):
    """
    Convert a single vcxproj into <name>.pro, defines.pri and includes.pri.

    Args:
        vcxproj_path: Path to the .vcxproj file
        output_dir: Directory for the generated files (defaults to the vcxproj directory)

    Returns:
        List of written file paths
    """
    vcxproj_path = Path(vcxproj_path)
    if output_dir is None:
        output_dir = vcxproj_path.parent

    lists, error = scan_vcxproj(vcxproj_path)
    if error is not None:
        logger.error('Error parsing .vcxproj file at line: %d %s', error.line, error.message)

    logger.debug('Collected %d header(s), %d source(s) from %s',
                 len(lists.headers), len(lists.sources), vcxproj_path.name)

    written = []
    pro_path = write_pro_file(lists, output_dir, vcxproj_path.stem, vcxproj_path.name)
    if pro_path is not None:
        written.append(pro_path)
    written.extend(write_pri_files(lists, output_dir, vcxproj_path.name))
    return written


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(description='Convert Visual Studio Project to qmake project files')
    parser.add_argument('vcxproj_path', help='Path to the .vcxproj file')
    parser.add_argument('--output-dir', '-o', dest='output_dir', help='Directory for the generated files')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')

    written = convert_vcxproj(args.vcxproj_path, args.output_dir)
    for path in written:
        print(f"  Wrote {path}")
    return 0 if len(written) == 3 else 1


if __name__ == '__main__':
    raise SystemExit(main())
