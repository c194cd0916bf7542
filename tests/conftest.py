import boto3
import pytest
from botocore.stub import ANY, Stubber

from logshipper.cloudwatch import LogStreamSession

GROUP  = "/app/api"
STREAM = "requests"


@pytest.fixture
def logs_client():
    return boto3.client(
        "logs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(logs_client):
    with Stubber(logs_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def session(logs_client):
    return LogStreamSession(logs_client, GROUP, STREAM)


def stub_existing_stream(stub, token=None):
    stub.add_response(
        "describe_log_groups",
        {"logGroups": [{"logGroupName": GROUP}]},
        {"logGroupNamePrefix": GROUP},
    )
    stream = {"logStreamName": STREAM}
    if token:
        stream["uploadSequenceToken"] = token
    stub.add_response(
        "describe_log_streams",
        {"logStreams": [stream]},
        {"logGroupName": GROUP, "logStreamNamePrefix": STREAM},
    )


def put_params(token=None, events=None):
    params = {
        "logGroupName": GROUP,
        "logStreamName": STREAM,
        "logEvents": events if events is not None else ANY,
    }
    if token:
        params["sequenceToken"] = token
    return params
