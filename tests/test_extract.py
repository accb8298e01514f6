# File: tests/test_extract.py
"""Extractor coverage against the files in tests/fixtures."""
from __future__ import annotations

import pytest

from conftest import names, read_fixture
from dep_scout.extract import BUILTIN_MODULES, ContentClass, classify, extract
from dep_scout.extract import cicd, config_files, docs, javascript, manifest, sourcemap
from dep_scout.extract.names import make_package, package_root


# --------------------------------------------------------------------------- #
#                                 Names                                       #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "spec,expected",
    [
        ("react", "react"),
        ("react@18/umd/react.js", "react"),
        ("lodash/fp", "lodash"),
        ("@scope/pkg", "@scope/pkg"),
        ("@scope/pkg@1.0.0/sub/file.js", "@scope/pkg"),
        ("'express',", "express"),
        ("./local", None),
        ("../up", None),
        ("/abs/path", None),
        ("https://example.com/x.js", None),
        ("@scope", None),
    ],
)
def test_package_root(spec, expected):
    assert package_root(spec) == expected


@pytest.mark.parametrize(
    "spec",
    ["fs", "fs/promises", "node:crypto", "path", "child_process", "name", "version", "x", "42", "a b"],
)
def test_make_package_rejects(spec):
    assert make_package(spec) is None


def test_scoped_name_kept_whole():
    pkg = make_package("@babel/core@^7.0.0")
    assert pkg is not None
    assert pkg.name == "@babel/core"
    assert pkg.namespace == ""
    assert pkg.claimed is False


# --------------------------------------------------------------------------- #
#                               Classification                                #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://x.io/package.json", {ContentClass.JSON}),
        ("https://x.io/yarn.lock", {ContentClass.JSON}),
        ("https://x.io/tsconfig.json", {ContentClass.JSON, ContentClass.CONFIG}),
        ("https://x.io/webpack.config.js", {ContentClass.CONFIG}),
        ("https://x.io/.github/workflows/ci.yml", {ContentClass.CICD}),
        ("https://x.io/Dockerfile", {ContentClass.CICD}),
        ("https://x.io/README.md", {ContentClass.DOC}),
        ("https://x.io/static/app.js.map", {ContentClass.SOURCEMAP}),
        ("https://x.io/static/app.js", set()),
    ],
)
def test_classify(url, expected):
    assert classify(url) == frozenset(expected)


# --------------------------------------------------------------------------- #
#                            Manifests and lockfiles                           #
# --------------------------------------------------------------------------- #


def test_package_json():
    found = names(manifest.extract(read_fixture("package.json")))
    assert set(found) == {"express", "@acme/ui-kit", "jest", "react", "fsevents", "acme-internal-logger"}


def test_package_json_express_only():
    assert names(manifest.extract('{"dependencies": {"express": "^4.0.0"}}')) == ["express"]


def test_package_lock():
    found = set(names(manifest.extract(read_fixture("package-lock.json"))))
    assert {"express", "body-parser", "debug", "@acme/billing-client"} <= found


def test_package_lock_v1_nested():
    found = set(names(manifest.extract(read_fixture("package-lock-v1.json"))))
    assert {"left-pad", "acme-string-utils", "nested-helper"} <= found


def test_yarn_lock():
    found = names(manifest.extract(read_fixture("yarn.lock")))
    assert "@babel/core" in found
    assert "@babel/generator" in found
    assert "convert-source-map" in found
    assert "lodash" in found
    assert "chalk" in found
    assert "version" not in found
    assert "integrity" not in found


def test_yarn_lock_scoped_header_line():
    assert names(manifest.extract('"@babel/core@^7.0.0":\n')) == ["@babel/core"]


def test_yarn_lock_metadata_prefix_is_not_metadata():
    content = (
        "acme-root@^1.0.0:\n"
        "  version \"1.0.0\"\n"
        "  dependencies:\n"
        "    versions \"^1.0.0\"\n"
        "    \"resolved-path\" \"^2.0.0\"\n"
    )
    assert names(manifest.extract(content)) == ["acme-root", "versions", "resolved-path"]


@pytest.mark.parametrize("content", ["{not json", "[1, 2", "", "[]", "42"])
def test_manifest_format_mismatch_is_silent(content):
    assert manifest.extract(content) == []


def test_extract_json_ignores_yarn_lock():
    assert manifest.extract_json(read_fixture("yarn.lock")) == []


# --------------------------------------------------------------------------- #
#                                 JavaScript                                  #
# --------------------------------------------------------------------------- #


def test_javascript_imports():
    source = """
    import React from 'react';
    import { debounce } from "lodash/debounce";
    import '@acme/polyfills';
    const express = require('express');
    const resolved = require.resolve('acme-resolved');
    const lazy = await import('acme-lazy');
    import helper from './helper';
    const path = require('path');
    """
    found = set(names(javascript.extract(source)))
    assert {"react", "lodash", "@acme/polyfills", "express", "acme-resolved", "acme-lazy"} <= found
    assert "path" not in found
    assert "helper" not in found


def test_javascript_bundle():
    found = set(names(javascript.extract(read_fixture("bundle.js"))))
    assert {"acme-vendor", "axios", "acme-charts", "acme-parcel-dep"} <= found
    assert not found & {"fs", "util", "node:util"}


def test_javascript_umd():
    found = set(names(javascript.extract(read_fixture("umd-bundle.js"))))
    assert {"jquery", "acme-umd-helper", "acmewidget", "acme-global-lib"} <= found
    assert "onload" not in found


def test_javascript_amd():
    found = set(names(javascript.extract(read_fixture("amd.js"))))
    assert {"acme-amd-core", "underscore", "acme-amd-extra"} <= found
    assert "module" not in found


def test_cdn_script_tag():
    html = '<script src="https://unpkg.com/react@18/umd/react.production.js">'
    assert set(names(javascript.extract(html))) == {"react"}


def test_html_scripts_and_importmap():
    found = set(names(javascript.extract(read_fixture("index.html"))))
    assert {"react", "@acme/cdn-lib", "vue"} <= found
    assert "local.js" not in found


def test_script_like_strings_in_source():
    source = "var s = '<script'; var t = '</' + 'script><![ x'; require('acme-widget');"
    assert names(javascript.extract(source)) == ["acme-widget"]


def test_webpack_externals():
    found = set(names(javascript.extract(read_fixture("webpack.config.js"))))
    assert {"react", "acme-analytics", "html-webpack-plugin"} <= found


# --------------------------------------------------------------------------- #
#                                Config files                                 #
# --------------------------------------------------------------------------- #


def test_webpack_config():
    found = set(names(config_files.extract(read_fixture("webpack.config.js"))))
    assert {"babel-loader", "style-loader", "css-loader", "html-webpack-plugin"} <= found
    assert "path" not in found


def test_babel_presets_and_plugins():
    found = set(names(config_files.extract(read_fixture("babelrc.json"))))
    assert {"@babel/preset-env", "@babel/preset-react", "@acme/babel-plugin-metrics"} <= found
    assert "defaults" not in found
    assert "targets" not in found


def test_tsconfig_extends_and_types():
    found = set(names(config_files.extract(read_fixture("tsconfig.json"))))
    assert {"@tsconfig/node18", "@types/node", "@types/jest"} <= found


def test_loader_chain():
    found = names(config_files.extract("{ loader: 'style-loader!css-loader?modules' }"))
    assert "style-loader" in found
    assert "css-loader" in found


# --------------------------------------------------------------------------- #
#                                   CI/CD                                     #
# --------------------------------------------------------------------------- #


def test_dockerfile_run():
    found = names(cicd.extract(read_fixture("Dockerfile")))
    assert found[:2] == ["lodash", "react"]
    assert "@acme/deploy-cli" in found
    assert "ci" not in found


def test_docker_run_line():
    assert names(cicd.extract("RUN npm install lodash react")) == ["lodash", "react"]


def test_workflow_commands():
    found = names(cicd.extract(read_fixture("ci.yml")))
    assert found == ["typescript", "acme-feature-flags", "eslint-config-acme"]


def test_makefile_macros():
    assert names(cicd.extract(read_fixture("Makefile"))) == ["acme-build-tools"]


def test_cicd_comments_and_flags():
    script = "# npm install commented-out\nnpm i -g --silent acme-global && yarn add -D acme-dev | tee log\n"
    assert names(cicd.extract(script)) == ["acme-global", "acme-dev"]


# --------------------------------------------------------------------------- #
#                               Documentation                                 #
# --------------------------------------------------------------------------- #


def test_readme():
    found = set(names(docs.extract(read_fixture("README.md"))))
    assert {"@acme/sdk", "acme-widgets", "acme-renderer", "create-acme-app", "acme-cli", "acme-theme"} <= found
    assert not found & {"and", "then", "configure"}


# --------------------------------------------------------------------------- #
#                                Source maps                                  #
# --------------------------------------------------------------------------- #


def test_source_map():
    found = set(names(sourcemap.extract(read_fixture("app.js.map"))))
    assert {"lodash", "@acme/ui-kit", "@internal/tracking", "mitt"} <= found


def test_source_map_wrong_shape():
    assert sourcemap.extract('{"sources": "not-a-list", "sourcesContent": 3}') == []
    assert sourcemap.extract("not json") == []


# --------------------------------------------------------------------------- #
#                                  Dispatch                                   #
# --------------------------------------------------------------------------- #


def test_dispatch_uses_url_class():
    content = read_fixture("package.json")
    assert "express" in names(extract("https://x.io/package.json", content))
    # plain JavaScript extraction does not read dependency maps
    assert "express" not in names(extract("https://x.io/app.js", content))


def test_dispatch_never_yields_builtins():
    content = "\n".join(f"require('{mod}')" for mod in sorted(BUILTIN_MODULES))
    assert extract("https://x.io/app.js", content) == []
