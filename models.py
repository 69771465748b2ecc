import base64
import json
from typing import Any, Literal
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    model_validator,
    field_validator,
)
from enum import StrEnum

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ApiVersion(StrEnum):
    V1 = "admission.k8s.io/v1"
    V1BETA1 = "admission.k8s.io/v1beta1"


class Operation(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CONNECT = "CONNECT"


class PatchType(StrEnum):
    JSONPatch = "JSONPatch"


class PatchOp(StrEnum):
    REPLACE = "replace"
    ADD = "add"
    REMOVE = "remove"


class PatchAction(BaseModel):
    op: PatchOp
    path: str
    value: Any = None


# https://jsonpatch.com/
Patch = RootModel[list[PatchAction]]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.30/#groupversionkind-v1-meta
class GroupVersionKind(BaseModel):
    model_config = ConfigDict(frozen=True)

    group: str = ""
    version: str
    kind: str

    @classmethod
    def from_api_version(cls, api_version, kind):
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)

    @property
    def api_version(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def __str__(self):
        return f"{self.group}/{self.version}, Kind={self.kind}"


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.30/#groupversionresource-v1-meta
class GroupVersionResource(BaseModel):
    model_config = ConfigDict(frozen=True)

    group: str = ""
    version: str
    resource: str

    def __str__(self):
        return f"{self.group}/{self.version}, Resource={self.resource}"


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.30/#status-v1-meta
class Status(BaseModel):
    message: str = ""
    status: Literal["Success", "Failure"] | None = None
    reason: str | None = None
    code: int | None = None


class UserInfo(BaseModel):
    username: str | None = None
    uid: str | None = None
    groups: list[str] | None = None
    extra: dict[str, list[str]] | None = None


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionResponse
class AdmissionResponse(BaseModel):
    uid: str = ""
    allowed: bool = False
    status: Status | None = None
    patchType: PatchType | None = None
    patch: str | None = None
    auditAnnotations: dict[str, str] | None = None
    warnings: list[str] | None = None

    @field_validator("patch", mode="before")
    @classmethod
    def validate_patch(cls, val):
        if isinstance(val, Patch):
            val = base64.b64encode(val.model_dump_json().encode()).decode()
        elif isinstance(val, (str, bytes)):
            # Make sure the base64 string contains valid data.
            Patch.model_validate_json(base64.b64decode(val))
        return val

    @model_validator(mode="after")
    def validate_model(self):
        if self.patch and not self.patchType:
            raise ValueError("missing patchType field")
        if self.patchType and not self.patch:
            raise ValueError(f"patchType is {self.patchType} but there is no patch")

        return self


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionRequest
class AdmissionRequest(BaseModel):
    uid: str
    kind: GroupVersionKind | None = None
    resource: GroupVersionResource | None = None
    subResource: str | None = None
    requestKind: GroupVersionKind | None = None
    requestResource: GroupVersionResource | None = None
    requestSubResource: str | None = None
    name: str | None = None
    namespace: str | None = None
    operation: Operation = Operation.CREATE
    userInfo: UserInfo | None = None
    object: Any = None
    oldObject: Any = None
    dryRun: bool | None = None
    options: dict[str, Any] | None = None

    @property
    def raw_object(self) -> bytes:
        """The admitted object re-serialized as JSON, or empty bytes if
        the request carries no object (e.g. DELETE)."""
        if self.object is None:
            return b""
        return json.dumps(self.object).encode()


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionReview
class AdmissionReview(BaseModel):
    apiVersion: ApiVersion = ApiVersion.V1
    kind: Literal["AdmissionReview"] = "AdmissionReview"
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None

    @model_validator(mode="after")
    def validate_model(self):
        if not (self.request or self.response):
            raise ValueError("must contain a request or a response")

        return self

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind.from_api_version(self.apiVersion, self.kind)


class ObjectMeta(BaseModel):
    name: str | None = None
    namespace: str | None = None
    uid: str | None = None
    labels: dict[str, str] = {}
    annotations: dict[str, str] = {}


class MemcachedSpec(BaseModel):
    # Number of memcached instances; must be > 0 to be admitted.
    size: int = Field(default=0, strict=True, ge=INT32_MIN, le=INT32_MAX)


class MemcachedStatus(BaseModel):
    nodes: list[str] = []


class Memcached(BaseModel):
    apiVersion: str = "cache.example.com/v1alpha1"
    kind: str = "Memcached"
    metadata: ObjectMeta = ObjectMeta()
    spec: MemcachedSpec = MemcachedSpec()
    status: MemcachedStatus = MemcachedStatus()
