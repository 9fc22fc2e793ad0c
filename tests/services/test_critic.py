from collections.abc import Callable
from pathlib import Path

import pytest

from dts_critic.clients.npm_registry import NpmRegistryClient
from dts_critic.exceptions import CannotEvaluateError, NameMismatchError
from dts_critic.models.config import CriticConfig
from dts_critic.models.diagnostic import CheckMode, ErrorKind
from dts_critic.models.runtime_module import RuntimeModule, RuntimeValueType
from dts_critic.services.critic import DtsCritic, check_declaration, check_source
from tests.consts import DTS_CRITIC_DIR, TESTSOURCE_DIR
from tests.utils import FakeInspector, requires_node


def _fixture(name: str) -> tuple[Path, Path]:
    return TESTSOURCE_DIR / f"{name}.d.ts", TESTSOURCE_DIR / f"{name}.js"


def test_check_declaration__on_missing_declaration__raises():
    with pytest.raises(CannotEvaluateError):
        check_declaration("pkg", None, RuntimeModule())


def test_check_declaration__on_disabled_kind__filters_it():
    config = CriticConfig(enabled_errors={ErrorKind.JS_PROPERTY_NOT_IN_DTS: False})

    diagnostics = check_declaration(
        "pkg",
        "export declare const a: number;\n",
        RuntimeModule(own_keys=("a", "b", "c")),
        "exports.a = exports.b = exports.c = 1;",
        config=config,
    )

    assert diagnostics == []


def test_check_declaration__on_missing_default_scenario__reports_fixture_position():
    dts, _ = _fixture("missingDefault")

    diagnostics = check_declaration(
        "missingDefault",
        dts.read_text(encoding="utf-8"),
        RuntimeModule(replaced_exports=True),
        "module.exports = {};\n",
    )

    assert [d.to_dict() for d in diagnostics] == [
        {
            "kind": "NoDefaultExport",
            "message": """The declaration doesn't match the JavaScript module 'missingDefault'. Reason:
The declaration specifies 'export default' but the JavaScript source does not mention 'default' anywhere.

The most common way to resolve this error is to use 'export =' syntax instead of 'export default'.
To learn more about 'export =' syntax, see https://www.typescriptlang.org/docs/handbook/modules.html#export--and-import--require.""",
            "position": {"start": 0, "length": 32},
        }
    ]


def test_check_declaration__on_unavailable_source__skips_default_check():
    diagnostics = check_declaration(
        "pkg", "export default function(): void;\n", RuntimeModule(), None, CheckMode.NPM
    )

    assert diagnostics == []


def test_check_source__on_fake_inspector__reads_resolved_source(
    make_inspector: Callable[..., FakeInspector],
):
    dts, js = _fixture("missingJsProperty")
    inspector = make_inspector(filename=js, own_keys=("foo", "bar"))
    critic = DtsCritic(inspector=inspector)

    diagnostics = critic.check_source("missingJsProperty", dts, js)

    assert inspector.inspected == [js]
    assert [d.to_dict() for d in diagnostics] == [
        {
            "kind": "JsPropertyNotInDts",
            "message": """The declaration doesn't match the JavaScript module 'missingJsProperty'. Reason:
The JavaScript module exports a property named 'foo', which is missing from the declaration module.""",
        }
    ]


def test_critique__on_mismatched_names__raises(make_inspector: Callable[..., FakeInspector]):
    critic = DtsCritic(inspector=make_inspector())

    with pytest.raises(NameMismatchError) as exc_info:
        critic.critique(DTS_CRITIC_DIR / "index.d.ts", TESTSOURCE_DIR / "noErrors.js")

    assert str(exc_info.value) == "d.ts name 'dts-critic' must match source name 'testsource'."


def test_critique__on_local_source__reports_local_mode(make_inspector: Callable[..., FakeInspector]):
    inspector = make_inspector(
        filename=DTS_CRITIC_DIR / "index.js",
        type_of=RuntimeValueType.FUNCTION,
        own_keys=("findDtsName", "checkSource"),
        is_callable=True,
        is_constructible=True,
        is_plain_object=False,
        replaced_exports=True,
    )

    report = DtsCritic(inspector=inspector).critique(DTS_CRITIC_DIR / "index.d.ts", DTS_CRITIC_DIR)

    assert report.name == "dts-critic"
    assert report.mode == CheckMode.LOCAL
    assert report.passed


@pytest.mark.parametrize(
    ("fixture", "kind"),
    [
        ("parseltongue", ErrorKind.NO_MATCHING_NPM_PACKAGE),
        ("typescript", ErrorKind.NO_MATCHING_NPM_VERSION),
        ("tslib", ErrorKind.NON_NPM_HAS_MATCHING_PACKAGE),
    ],
)
def test_critique__on_registry_problem__returns_registry_diagnostic(
    fixture: str,
    kind: ErrorKind,
    config: CriticConfig,
    registry_client: NpmRegistryClient,
    make_inspector: Callable[..., FakeInspector],
):
    inspector = make_inspector()
    critic = DtsCritic(config=config, registry_client=registry_client, inspector=inspector)

    report = critic.critique(TESTSOURCE_DIR / f"{fixture}.d.ts")

    assert report.mode == CheckMode.NPM
    assert [d.kind for d in report.diagnostics] == [kind]
    assert inspector.inspected == []


def test_critique__on_npm_package__downloads_and_checks_source(
    tmp_path: Path,
    config: CriticConfig,
    registry_client: NpmRegistryClient,
    make_inspector: Callable[..., FakeInspector],
):
    dts = tmp_path / "left-pad" / "index.d.ts"
    dts.parent.mkdir()
    dts.write_text(
        "// Type definitions for left-pad 1.2\n"
        "declare function leftPad(str: string, len: number, ch?: string): string;\n"
        "export default leftPad;\n",
        encoding="utf-8",
    )
    inspector = make_inspector(
        type_of=RuntimeValueType.FUNCTION,
        is_callable=True,
        is_constructible=True,
        is_plain_object=False,
        replaced_exports=True,
    )
    critic = DtsCritic(config=config, registry_client=registry_client, inspector=inspector)

    report = critic.critique(dts)

    assert report.name == "left-pad"
    assert [d.kind for d in report.diagnostics] == [
        ErrorKind.JS_CALLABLE,
        ErrorKind.NEEDS_EXPORT_EQUALS,
        ErrorKind.NO_DEFAULT_EXPORT,
    ]
    assert inspector.inspected[0].name == "index.js"


def test_critique__on_real_default_export_package__suppresses_default_check(
    tmp_path: Path,
    config: CriticConfig,
    registry_client: NpmRegistryClient,
    make_inspector: Callable[..., FakeInspector],
):
    dts = tmp_path / "react-native-thing.d.ts"
    dts.write_text(
        "// Type definitions for react-native-thing 1.2\nexport default function thing(): void;\n",
        encoding="utf-8",
    )
    critic = DtsCritic(config=config, registry_client=registry_client, inspector=make_inspector())

    assert critic.critique(dts).diagnostics == []


def test_critique__on_failed_download__raises(
    tmp_path: Path,
    config: CriticConfig,
    registry_client: NpmRegistryClient,
    make_inspector: Callable[..., FakeInspector],
):
    dts = tmp_path / "typescript.d.ts"
    dts.write_text("// Type definitions for typescript 3.8\n", encoding="utf-8")
    critic = DtsCritic(config=config, registry_client=registry_client, inspector=make_inspector())

    with pytest.raises(CannotEvaluateError):
        critic.critique(dts)


def test_critique__on_non_npm_package__skips_source(
    config: CriticConfig,
    registry_client: NpmRegistryClient,
    make_inspector: Callable[..., FakeInspector],
    tmp_path: Path,
):
    dts = tmp_path / "parseltongue.d.ts"
    dts.write_text(
        "// Type definitions for non-npm package parseltongue 1.0\nexport declare const x: number;\n",
        encoding="utf-8",
    )
    inspector = make_inspector()
    critic = DtsCritic(config=config, registry_client=registry_client, inspector=inspector)

    assert critic.critique(dts).diagnostics == []
    assert inspector.inspected == []


@requires_node
@pytest.mark.parametrize(
    ("name", "kind"),
    [
        ("missingJsProperty", ErrorKind.JS_PROPERTY_NOT_IN_DTS),
        ("missingDtsProperty", ErrorKind.DTS_PROPERTY_NOT_IN_JS),
        ("missingDefault", ErrorKind.NO_DEFAULT_EXPORT),
        ("missingJsSignatureExportEquals", ErrorKind.JS_CALLABLE),
        ("missingJsSignatureNoExportEquals", ErrorKind.JS_CALLABLE),
        ("missingDtsSignature", ErrorKind.DTS_CALLABLE),
        ("missingExportEquals", ErrorKind.NEEDS_EXPORT_EQUALS),
    ],
)
def test_check_source__on_node_fixture__reports_kind(name: str, kind: ErrorKind):
    dts, js = _fixture(name)

    diagnostics = check_source(name, dts, js)

    assert kind in [d.kind for d in diagnostics]


@requires_node
def test_check_source__on_matching_fixture__reports_nothing():
    dts, js = _fixture("noErrors")

    assert check_source("noErrors", dts, js) == []


@requires_node
def test_check_source__on_callable_with_export_equals__omits_guidance():
    dts, js = _fixture("missingJsSignatureExportEquals")

    diagnostics = check_source("missingJsSignatureExportEquals", dts, js)

    assert [d.message for d in diagnostics] == [
        "The declaration doesn't match the JavaScript module 'missingJsSignatureExportEquals'. Reason:\n"
        "The JavaScript module can be called or constructed, but the declaration module cannot."
    ]


@requires_node
def test_critique__on_matching_package_folder__passes():
    report = DtsCritic().critique(DTS_CRITIC_DIR / "index.d.ts", DTS_CRITIC_DIR / "index.js")

    assert report.passed


def test_check_declaration__on_module_augmentation__matches_top_level_exports():
    declaration = (
        "export declare function plugin(): void;\n"
        'declare module "vue/types/vue" {\n'
        "    interface Vue { $plugin: string; }\n"
        "}\n"
    )

    diagnostics = check_declaration(
        "vue-plugin",
        declaration,
        RuntimeModule(own_keys=("plugin",)),
        "exports.plugin = function () {};",
    )

    assert diagnostics == []


def test_check_declaration__on_default_alias_export__reports_nothing():
    diagnostics = check_declaration(
        "pkg",
        "declare function main(): void;\nexport { main as default };\n",
        RuntimeModule(own_keys=("default",), has_default_key=True),
        "exports.default = main;",
    )

    assert diagnostics == []


def test_check_declaration__on_real_default_export_package__is_suppressed_in_local_mode():
    diagnostics = check_declaration(
        "react-native-foo",
        "export default function main(): void;\n",
        RuntimeModule(),
        "module.exports = {};",
        CheckMode.LOCAL,
    )

    assert diagnostics == []
