# wpship_config.py
# Example config for a WooCommerce extension deployed to the WooCommerce repo
from __future__ import annotations

from wpship.config import Commands, DeployConfig, DeployTarget, Paths, PluginInfo, RepoRef


def config():
    return DeployConfig(
        plugin=PluginInfo(
            name="WooCommerce Example Gateway",
            slug="woocommerce-gateway-example",
            main_file="woocommerce-gateway-example.php",
            framework_version="5.10.0",
        ),
        platform="wc",
        paths=Paths(
            wc_repo="../wc-repos/woocommerce-gateway-example",
        ),
        deploy=DeployTarget(
            type="wc",
            dev=RepoRef("example-org", "woocommerce-gateway-example"),
            production=RepoRef("woocommerce", "woocommerce-gateway-example"),
            docs=RepoRef("example-org", "docs"),
        ),
        trello_board="AbCdEf12",
        commands=Commands(
            lint_scripts="npx eslint assets/js/src",
            compile_scripts="npx babel assets/js/src --out-dir assets/js/frontend",
            lint_styles="npx stylelint 'assets/css/**/*.scss'",
            compile_styles="npx sass assets/css/scss:assets/css",
        ),
    )
