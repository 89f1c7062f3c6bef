from pathlib import Path

import pytest

VCXPROJ = r"""<?xml version="1.0" encoding="utf-8"?>
<Project DefaultTargets="Build" ToolsVersion="15.0" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <ItemGroup Label="ProjectConfigurations">
    <ProjectConfiguration Include="Development_Editor|x64">
      <Configuration>Development_Editor</Configuration>
      <Platform>x64</Platform>
    </ProjectConfiguration>
  </ItemGroup>
  <PropertyGroup Condition="'$(Configuration)|$(Platform)'=='Development_Editor|x64'">
    <NMakePreprocessorDefinitions>$(NMakePreprocessorDefinitions);WITH_EDITOR=1;;UE_BUILD_DEVELOPMENT=1</NMakePreprocessorDefinitions>
    <NMakeIncludeSearchPath>..\..\Source\App\Public;..\..\Source\App\Private;</NMakeIncludeSearchPath>
  </PropertyGroup>
  <ItemGroup>
    <ClInclude Include="..\..\Source\App\Public\App.h" />
    <ClInclude Include="..\..\Source\App\Public\AppGameMode.h" />
  </ItemGroup>
  <ItemGroup>
    <ClCompile Include="..\..\Source\App\Private\App.cpp" />
    <ClCompile Include="..\..\Source\App\Private\AppGameMode.cpp" />
  </ItemGroup>
  <ItemGroup>
    <None Include="..\..\App.uproject" />
  </ItemGroup>
</Project>
"""

PROFILES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE QtCreatorProfiles>
<!-- Written by QtCreator 4.11.0, 2020-02-01T12:00:00. -->
<qtcreator>
 <data>
  <variable>Profile.0</variable>
  <valuemap type="QVariantMap">
   <value type="bool" key="PE.Profile.AutoDetected">true</value>
   <valuemap type="QVariantMap" key="PE.Profile.Data">
    <value type="QString" key="PE.Profile.Name">Nested</value>
   </valuemap>
   <value type="QString" key="PE.Profile.Id">{11111111-aaaa}</value>
   <value type="QString" key="PE.Profile.Name">Desktop</value>
  </valuemap>
 </data>
 <data>
  <variable>Profile.1</variable>
  <valuemap type="QVariantMap">
   <value type="QString" key="PE.Profile.Id">{22222222-bbbb}</value>
   <value type="QString" key="PE.Profile.Name">Unreal</value>
  </valuemap>
 </data>
 <data>
  <variable>Profile.Count</variable>
  <value type="int">2</value>
 </data>
 <data>
  <variable>Profile.Default</variable>
  <value type="QString">{11111111-aaaa}</value>
 </data>
 <data>
  <variable>Version</variable>
  <value type="int">1</value>
 </data>
</qtcreator>
"""


@pytest.fixture
def solution_dir(tmp_path: Path) -> Path:
    """A solution directory with Intermediate/ProjectFiles/App.vcxproj"""
    project_files = tmp_path / 'sol' / 'Intermediate' / 'ProjectFiles'
    project_files.mkdir(parents=True)
    (project_files / 'App.vcxproj').write_text(VCXPROJ, encoding='utf-8')
    return tmp_path / 'sol'


@pytest.fixture
def roaming_dir(tmp_path: Path) -> Path:
    """An APPDATA directory holding QtProject/qtcreator/profiles.xml"""
    roaming = tmp_path / 'roaming'
    qtcreator = roaming / 'QtProject' / 'qtcreator'
    qtcreator.mkdir(parents=True)
    (qtcreator / 'profiles.xml').write_text(PROFILES_XML, encoding='utf-8')
    return roaming
