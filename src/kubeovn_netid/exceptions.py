"""Error kinds raised by the network identity resolution engine.

Every error is terminal: the engine never retries and never substitutes a
best-guess value.  Callers decide whether a failure is fatal (the backup
action treats all of them as a hard backup failure for the VM).
"""

from __future__ import annotations

from typing import Optional


class NetIdentityError(Exception):
    """Base class for all resolution failures."""


class InvalidInput(NetIdentityError, ValueError):
    """A required input (VM, backup) was missing or unusable."""


class MalformedReference(NetIdentityError):
    """A network name or attachment reference does not match its grammar."""

    def __init__(self, value: str, expected: str) -> None:
        super().__init__(f"expected '{value}' to have format {expected}")
        self.value = value
        self.expected = expected


class InvalidReferenceSuffix(NetIdentityError):
    """An attachment reference lacks the Kube-OVN annotation suffix."""

    def __init__(self, reference: str, suffix: str) -> None:
        super().__init__(
            f"invalid network annotation, expected '{reference}' to have suffix {suffix}"
        )
        self.reference = reference
        self.suffix = suffix


class NamespaceMismatch(NetIdentityError):
    """A secondary network lives in another namespace than the VM."""

    def __init__(self, nad_namespace: str, vm_namespace: str) -> None:
        super().__init__(
            "expected NAD to be in the same namespace as the VM, "
            f"got {nad_namespace} for NAD and {vm_namespace} for VM"
        )
        self.nad_namespace = nad_namespace
        self.vm_namespace = vm_namespace


class EmptyIdentity(NetIdentityError):
    """VM name or namespace is empty when building a record identifier."""

    def __init__(self, vm_name: str, vm_namespace: str) -> None:
        super().__init__(
            f"expected a VM name/namespace, got '{vm_name}' and '{vm_namespace}'"
        )
        self.vm_name = vm_name
        self.vm_namespace = vm_namespace


class RecordNotFound(NetIdentityError):
    """No Kube-OVN IP record exists under the derived identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"IP custom resource '{identifier}' not found")
        self.identifier = identifier


class StoreUnavailable(NetIdentityError):
    """The IP record store could not be reached or answered with an error."""

    def __init__(self, message: str, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class ResolutionError(NetIdentityError):
    """Wraps any failure raised while resolving a VM, labelled with the VM."""

    def __init__(self, namespace: str, name: str, reason: NetIdentityError) -> None:
        super().__init__(
            f"failed to retrieve netInfo for VM {namespace}/{name}: {reason}"
        )
        self.namespace = namespace
        self.name = name
        self.reason = reason
