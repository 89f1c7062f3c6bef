import logging
import os
from pathlib import Path

from qtcreator_kits import KitFound, KitNotFound, KitParseError, lookup_kit
from vcxproj2qmake import DEFINES_PRI, INCLUDES_PRI, scan_vcxproj, write_pri_files, write_pro_file

logger = logging.getLogger(__name__)

INTERMEDIATE_PROJECTFILES = Path('Intermediate') / 'ProjectFiles'

KIT_NAME_ENV = 'QTCREATOR_KIT_NAME'

PROFILES_XML_HINT = 'profiles.xml (no APPDATA, XDG_CONFIG_HOME or HOME set)'


class ProjectInitializer:
    """
    Generates the Qt Creator project files for one Unreal project.

    Reads <solution>/Intermediate/ProjectFiles/<project>.vcxproj and writes
    <project>.pro, defines.pri and includes.pri next to it, then looks up the
    configured kit in Qt Creator's profiles.xml.

    Args:
        solution_path: Directory containing the solution (the project root)
        project_name: Name of the project, also the vcxproj file stem
        kit_name: Name of the Qt Creator kit to build with
        environ: Environment mapping used to find the Qt Creator settings
                 (defaults to os.environ)
    """

    def __init__(self, solution_path, project_name, kit_name='', environ=None):
        self.solution_path = Path(solution_path)
        self.project_name = project_name
        self.kit_name = kit_name or ''
        self.environ = os.environ if environ is None else environ
        self._lists = None

    @property
    def project_files_dir(self):
        return self.solution_path / INTERMEDIATE_PROJECTFILES

    @property
    def vcxproj_path(self):
        return self.project_files_dir / f'{self.project_name}.vcxproj'

    @property
    def pro_path(self):
        return self.project_files_dir / f'{self.project_name}.pro'

    @property
    def pri_paths(self):
        return [self.project_files_dir / DEFINES_PRI, self.project_files_dir / INCLUDES_PRI]

    @property
    def lists(self):
        """Lists collected from the vcxproj, scanned once on first use"""
        if self._lists is None:
            lists, error = scan_vcxproj(self.vcxproj_path)
            if error is not None:
                logger.error('Error parsing .vcxproj file at line: %d %s', error.line, error.message)
            self._lists = lists
        return self._lists

    def run(self):
        """
        Create the .pro file, the .pri files and look up the kit, in that order.

        Each step runs regardless of how the previous ones went and nothing
        already written is rolled back. Returns the paths that were written.
        """
        written = []

        pro_path = self.create_pro_file()
        if pro_path is not None:
            written.append(pro_path)

        written.extend(self.create_pri_files())

        self.create_pro_user_file()

        return written

    def create_pro_file(self):
        return write_pro_file(self.lists, self.project_files_dir, self.project_name, self.vcxproj_path.name)

    def create_pri_files(self):
        return write_pri_files(self.lists, self.project_files_dir, self.vcxproj_path.name)

    def create_pro_user_file(self):
        """
        Find the id of the configured kit in Qt Creator's profiles.xml.

        Nothing is written yet: the id is only logged. Returns the kit id, or
        None when it could not be determined.
        """
        if not self.kit_name:
            logger.error('Unreal kit name must be set to create project files correctly')
            return None

        try:
            path, result = lookup_kit(self.kit_name, self.environ)
        except (OSError, UnicodeDecodeError) as e:
            logger.error('Could not read Qt Creator profiles: %s', e)
            return None

        if result is None:
            logger.error('"%s" not found', path if path is not None else PROFILES_XML_HINT)
            return None

        if isinstance(result, KitFound):
            logger.info('Kit "%s" uuid: %s', self.kit_name, result.kit_id)
            return result.kit_id

        if isinstance(result, KitNotFound):
            logger.warning('Kit "%s" not found in %s (available: %s)',
                           self.kit_name, path, ', '.join(result.available) or 'none')
        elif isinstance(result, KitParseError):
            logger.error('Error parsing profiles.xml file at line: %d %s', result.line, result.message)
        return None


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(description='Generate Qt Creator project files for an Unreal project')
    parser.add_argument('solution_path', help='Path to the solution (project root) directory')
    parser.add_argument('project_name', help='Project name, as in Intermediate/ProjectFiles/<name>.vcxproj')
    parser.add_argument('--kit-name', '-k', dest='kit_name', default=os.environ.get(KIT_NAME_ENV, ''),
                        help=f'Qt Creator kit to use (default: ${KIT_NAME_ENV})')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')

    initializer = ProjectInitializer(args.solution_path, args.project_name, args.kit_name)
    print(f"Generating Qt Creator project files for {args.project_name}")
    print(f"  Project files directory: {initializer.project_files_dir}")

    written = initializer.run()
    for path in written:
        print(f"  Wrote {path}")

    return 0 if len(written) == 3 else 1


if __name__ == '__main__':
    raise SystemExit(main())
