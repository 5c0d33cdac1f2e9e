"""Fake boto3 clients simulating paged Parameter Store and Secrets Manager backends."""
from typing import Dict, List, Optional, Sequence

import pytest
from botocore.exceptions import ClientError


def client_error(code: str, operation: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def split_pages(items: List[dict], page_sizes: Optional[Sequence[int]]) -> List[List[dict]]:
    if not page_sizes:
        return [list(items)]
    assert sum(page_sizes) == len(items), "page sizes must cover every item"
    pages, start = [], 0
    for size in page_sizes:
        pages.append(items[start:start + size])
        start += size
    return pages


class _FakePaginator:
    def __init__(self, owner: "_PagedClient"):
        self.owner = owner

    def paginate(self, **kwargs):
        self.owner.list_calls.append(kwargs)
        for index, items in enumerate(self.owner.pages):
            if index == self.owner.fail_list_on_page:
                raise client_error("AccessDeniedException", self.owner.operation_name)
            self.owner.pages_served += 1
            yield {self.owner.result_key: [self.owner.list_item(item) for item in items]}


class _PagedClient:
    """Hands out a paginator over pre-split pages for one list operation."""

    operation = ""
    operation_name = ""
    result_key = ""

    def __init__(self, pages: List[List[dict]], fail_list_on_page: Optional[int] = None):
        self.pages = pages
        self.fail_list_on_page = fail_list_on_page
        self.list_calls: List[dict] = []
        self.paginator_operations: List[str] = []
        self.pages_served = 0

    def get_paginator(self, operation: str):
        self.paginator_operations.append(operation)
        assert operation == self.operation, f"unexpected paginator {operation}"
        return _FakePaginator(self)

    def list_item(self, item: dict) -> dict:
        return item


class FakeSSMClient(_PagedClient):
    """Serves get_parameters_by_path in pages and describe_parameters by name."""

    operation = "get_parameters_by_path"
    operation_name = "GetParametersByPath"
    result_key = "Parameters"

    def __init__(self, parameters: List[dict], page_sizes: Optional[Sequence[int]] = None,
                 fail_list_on_page: Optional[int] = None, fail_describe_for: Optional[str] = None):
        super().__init__(split_pages(parameters, page_sizes), fail_list_on_page)
        self.parameters = {p["Name"]: p for p in parameters}
        self.fail_describe_for = fail_describe_for
        self.describe_calls: List[str] = []

    def list_item(self, item: dict) -> dict:
        return {"Name": item["Name"], "Value": item["Value"], "ARN": item.get("ARN"), "Type": "SecureString"}

    def describe_parameters(self, ParameterFilters):
        name = ParameterFilters[0]["Values"][0]
        self.describe_calls.append(name)
        if name == self.fail_describe_for:
            raise client_error("ThrottlingException", "DescribeParameters", "Rate exceeded")
        parameter = self.parameters.get(name)
        if parameter is None:
            return {"Parameters": []}
        detail = {"Name": name, "Type": "SecureString"}
        if parameter.get("Description") is not None:
            detail["Description"] = parameter["Description"]
        return {"Parameters": [detail]}


class FakeSecretsManagerClient(_PagedClient):
    """Serves list_secrets in pages and get_secret_value by ARN."""

    operation = "list_secrets"
    operation_name = "ListSecrets"
    result_key = "SecretList"

    def __init__(self, entries: List[dict], values: Dict[str, str],
                 page_sizes: Optional[Sequence[int]] = None, fail_value_for: Optional[str] = None,
                 fail_list_on_page: Optional[int] = None):
        super().__init__(split_pages(entries, page_sizes), fail_list_on_page)
        self.values = values
        self.fail_value_for = fail_value_for
        self.value_calls: List[str] = []

    def get_secret_value(self, SecretId):
        self.value_calls.append(SecretId)
        if SecretId == self.fail_value_for:
            raise client_error("ResourceNotFoundException", "GetSecretValue", "Secrets Manager can't find the specified secret.")
        value = self.values[SecretId]
        if isinstance(value, bytes):
            return {"ARN": SecretId, "SecretBinary": value}
        return {"ARN": SecretId, "SecretString": value}


def ssm_parameter(name: str, value: str, description: Optional[str] = None) -> dict:
    return {
        "Name": name,
        "Value": value,
        "Description": description,
        "ARN": f"arn:aws:ssm:us-east-1:123456789012:parameter{name}",
    }


def sm_entry(name: str, description: Optional[str] = None, versions: Optional[Dict[str, List[str]]] = None) -> dict:
    entry = {
        "Name": name,
        "ARN": f"arn:aws:secretsmanager:us-east-1:123456789012:secret:{name}",
        "SecretVersionsToStages": versions if versions is not None else {"v1": ["AWSCURRENT"]},
    }
    if description is not None:
        entry["Description"] = description
    return entry


@pytest.fixture
def app_parameters():
    """The /app/ example: one parameter with a description, one without."""
    return [
        ssm_parameter("/app/db_password", "secret1", "db pw"),
        ssm_parameter("/app/api_key", "secret2"),
    ]


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Point the config directory at a temporary home."""
    from pathlib import Path
    from aws_secrets_dumper.secrets.domains import preferences

    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)
    monkeypatch.delenv("AWS_SECRETS_DUMPER_CONFIG", raising=False)

    fake_config_dir = fake_home / ".config" / "aws-secrets-dumper"
    monkeypatch.setattr(preferences, "CONFIG_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    return fake_home
