"""Tests for building a pool from a JSON deployment file."""

import json

import pytest
from fastapi.testclient import TestClient

from stableswap import deployment
from stableswap.api.main import app
from stableswap.deployment import (
    POOL_CONFIG_ENV,
    DeploymentConfig,
    build_pool,
    get_default_pool,
    load_deployment,
)
from stableswap.pool_info import PoolKind, classify
from tests.helpers import ADMIN, MANAGER, NATIVE, PAUSER, POOL, TOKEN_A, TOKEN_B
from tests.helpers.constants import LP_TOKEN, SCENARIO_MINT


def deployment_json(assets=(TOKEN_A, TOKEN_B), seed=True) -> dict:
    data = {
        "poolAddress": POOL,
        "lpToken": LP_TOKEN,
        "pool": {
            "assets": [{"address": address} for address in assets],
            "amplification": 1000,
            "fee": 1000000,
            "adminFee": 5000000000,
            "priceThresholds": ["30000000000000000", "30000000000000000"],
            "admin": ADMIN,
            "manager": MANAGER,
            "pauser": PAUSER,
        },
        "prices": {assets[0]: 84660000000, assets[1]: 83000000000},
    }
    if seed:
        data["seed"] = ["102000000000000000000000", "100000000000000000000000"]
    return data


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "pool.json"
    path.write_text(json.dumps(deployment_json()))
    return path


@pytest.fixture
def reset_default_pool(monkeypatch):
    monkeypatch.setattr(deployment, "_default_pool", None)


class TestBuildPool:
    """Tests for build_pool()."""

    def test_seeded_from_file(self, config_file):
        pool = build_pool(load_deployment(config_file))
        assert pool.address == POOL
        assert pool.total_supply == SCENARIO_MINT
        assert pool.lp_token.balance_of(ADMIN) == SCENARIO_MINT
        assert pool.balances(0) == 102_000 * 10**18

    def test_unseeded(self):
        pool = build_pool(DeploymentConfig.model_validate(deployment_json(seed=False)))
        assert pool.total_supply == 0

    def test_native_slot(self):
        data = deployment_json(assets=(NATIVE, TOKEN_B))
        pool = build_pool(DeploymentConfig.model_validate(data))
        assert classify(pool) is PoolKind.ASSET0_NATIVE
        assert pool.total_supply == SCENARIO_MINT

    def test_seed_length(self):
        data = deployment_json()
        data["seed"] = ["1"]
        with pytest.raises(ValueError):
            DeploymentConfig.model_validate(data)


class TestDefaultPool:
    """Tests for the environment-configured pool used by the API."""

    def test_unset(self, monkeypatch, reset_default_pool):
        monkeypatch.delenv(POOL_CONFIG_ENV, raising=False)
        assert get_default_pool() is None

    def test_built_once(self, monkeypatch, reset_default_pool, config_file):
        monkeypatch.setenv(POOL_CONFIG_ENV, str(config_file))
        pool = get_default_pool()
        assert pool is not None
        assert get_default_pool() is pool

    def test_served_by_api(self, monkeypatch, reset_default_pool, config_file):
        monkeypatch.setenv(POOL_CONFIG_ENV, str(config_file))
        response = TestClient(app).get("/pool")
        assert response.status_code == 200
        assert response.json()["lpSupply"] == str(SCENARIO_MINT)
