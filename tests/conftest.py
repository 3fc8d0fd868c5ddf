import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import h5p_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from h5p_toolkit.content.builder import QuestionSetBuilder, create_answer  # noqa: E402
from h5p_toolkit.core.models import (  # noqa: E402
    FileReference,
    Library,
    LibraryDefinition,
    LibraryDependency,
    Package,
    PackageDefinition,
)
from h5p_toolkit.semantics import BundledSemantics, build_library  # noqa: E402


# Common test fixtures
@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def multichoice_definition() -> LibraryDefinition:
    return LibraryDefinition(
        title="Multiple Choice",
        machine_name="H5P.MultiChoice",
        major_version=1,
        minor_version=16,
        patch_version=4,
        runnable=True,
        license="MIT",
        preloaded_js=(FileReference("js/multichoice.js"),),
        preloaded_css=(FileReference("css/multichoice.css"),),
    )


@pytest.fixture
def multichoice_library(multichoice_definition) -> Library:
    return build_library(
        multichoice_definition,
        BundledSemantics(),
        files={
            "js/multichoice.js": b"H5P.MultiChoice = function () {};\n",
            "css/multichoice.css": b".h5p-multichoice { color: black; }\n",
        },
    )


@pytest.fixture
def geography_package() -> Package:
    """
    "Geography Quiz" package: one library named Quiz.MultiChoice 1.16.0
    (outside the default H5P. prefix) and a one-question set passing at 60%.
    """
    definition = LibraryDefinition(
        title="Quiz Multiple Choice",
        machine_name="Quiz.MultiChoice",
        major_version=1,
        minor_version=16,
        patch_version=0,
        runnable=True,
        preloaded_js=(FileReference("js/multichoice.js"),),
    )
    library = build_library(
        definition,
        BundledSemantics(aliases={"Quiz.MultiChoice": "H5P.MultiChoice"}),
        files={"js/multichoice.js": b"// quiz\n"},
    )

    question_set = (
        QuestionSetBuilder(multichoice_library="Quiz.MultiChoice 1.16")
        .set_title("Geography Quiz")
        .set_pass_percentage(60)
        .add_multiple_choice_question(
            "Capital of France?",
            [create_answer("Paris", True), create_answer("London", False)],
        )
        .build()
    )

    package = Package.new()
    package.set_package_definition(PackageDefinition(
        title="Geography Quiz",
        main_library="Quiz.MultiChoice",
        language="en",
        preloaded_dependencies=(LibraryDependency("Quiz.MultiChoice", 1, 16),),
    ))
    package.set_content(question_set.to_dict())
    package.add_library(library)
    return package
