from dataclasses import dataclass, field

import pytest

from helmkit.flags import flag, to_flags


@dataclass
class Flags:
    no_wait: bool = flag("wait", default=False)
    no_wait_for_jobs: bool = flag("no-wait-for-jobs", default=False)
    not_a_flag: str = ""
    string_flag: str = flag("string-flag", default="")
    string_array: list = flag("string-array", default_factory=list)
    hidden: str = flag("-", default="ignored")


@pytest.mark.parametrize(
    "options, expected",
    [
        (Flags(), ["--wait=true", "--no-wait-for-jobs=false"]),
        (
            Flags(string_flag="something"),
            ["--wait=true", "--no-wait-for-jobs=false", "--string-flag=something"],
        ),
        (
            Flags(string_flag="something", string_array=["1", "2", "3"]),
            [
                "--wait=true",
                "--no-wait-for-jobs=false",
                "--string-flag=something",
                "--string-array=1",
                "--string-array=2",
                "--string-array=3",
            ],
        ),
    ],
)
def test_to_flags(options, expected):
    assert to_flags(options) == expected


def test_negation_applies_when_set():
    assert to_flags(Flags(no_wait=True, no_wait_for_jobs=True))[:2] == [
        "--wait=false",
        "--no-wait-for-jobs=true",
    ]


def test_non_dataclass_rejected():
    with pytest.raises(TypeError):
        to_flags({"wait": True})


def test_plain_field_not_rendered():
    @dataclass
    class Opts:
        plain: str = field(default="x")
        count: int = flag("count", default=3)

    assert to_flags(Opts()) == ["--count=3"]