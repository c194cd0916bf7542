"""
CloudWatch Logs stream session.

One session owns one (group, stream) pair and the sequence token that
CloudWatch expects on the next PutLogEvents call. Every append goes through
`_lock` so the read-token / append / update-token sequence never interleaves.
"""
import asyncio
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .diagnostics import log
from .events import LogEvent


def error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "ClientError")


class LogStreamSession:
    def __init__(self, client, log_group: str, log_stream: str):
        self.client = client
        self.log_group = log_group
        self.log_stream = log_stream
        self.sequence_token: Optional[str] = None
        self.ready = False
        self._lock = asyncio.Lock()

    # ========= Provisioning =========
    async def ensure_setup(self) -> bool:
        try:
            if not await asyncio.to_thread(self._group_exists):
                await self._create("create_log_group", logGroupName=self.log_group)

            stream = await asyncio.to_thread(self._find_stream)
            if stream is None:
                await self._create(
                    "create_log_stream",
                    logGroupName=self.log_group,
                    logStreamName=self.log_stream,
                )
                # a new stream takes its first append without a token
                self.sequence_token = None
            else:
                self.sequence_token = stream.get("uploadSequenceToken")
        except (ClientError, BotoCoreError) as e:
            log("cloudwatch setup failed:", self.log_group, self.log_stream, e)
            return False

        self.ready = True
        return True

    def _group_exists(self) -> bool:
        pages = self.client.get_paginator("describe_log_groups").paginate(
            logGroupNamePrefix=self.log_group
        )
        for page in pages:
            if any(g.get("logGroupName") == self.log_group for g in page.get("logGroups", [])):
                return True
        return False

    def _find_stream(self) -> Optional[dict]:
        pages = self.client.get_paginator("describe_log_streams").paginate(
            logGroupName=self.log_group, logStreamNamePrefix=self.log_stream
        )
        for page in pages:
            for s in page.get("logStreams", []):
                if s.get("logStreamName") == self.log_stream:
                    return s
        return None

    async def _create(self, op: str, **params):
        try:
            await asyncio.to_thread(getattr(self.client, op), **params)
        except ClientError as e:
            # another process got there first
            if error_code(e) != "ResourceAlreadyExistsException":
                raise

    # ========= Append =========
    async def put_event(self, event: LogEvent) -> bool:
        async with self._lock:
            try:
                return await self._append(event, retry=True)
            except (ClientError, BotoCoreError) as e:
                log("cloudwatch append failed:", self.log_stream, e)
                return False

    async def _append(self, event: LogEvent, retry: bool) -> bool:
        args = {
            "logGroupName": self.log_group,
            "logStreamName": self.log_stream,
            "logEvents": [event.to_cloudwatch()],
        }
        if self.sequence_token:
            args["sequenceToken"] = self.sequence_token

        try:
            resp = await asyncio.to_thread(self.client.put_log_events, **args)
        except ClientError as e:
            code = error_code(e)
            expected = e.response.get("expectedSequenceToken")
            if code == "DataAlreadyAcceptedException":
                if expected:
                    self.sequence_token = expected
                else:
                    log("event already accepted, no expected token; keeping", self.sequence_token)
                return True
            if code == "InvalidSequenceTokenException" and expected and retry:
                log("stale sequence token, retrying with", expected)
                self.sequence_token = expected
                return await self._append(event, retry=False)
            raise

        rejected = resp.get("rejectedLogEventsInfo")
        if rejected:
            log("cloudwatch rejected events:", rejected)
        self.sequence_token = resp.get("nextSequenceToken", self.sequence_token)
        return not rejected
