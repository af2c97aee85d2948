import json
import re

from pydantic import ValidationError as PydanticValidationError

from zfsflex.errors import ParseError, ValidationError
from zfsflex.volumes.models import VolumeParams, VolumeRequest

# Binary human sizes: "10Gi", "512M", "1.5GiB", "100"
SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?) ?([kKmMgGtTpP])?[iI]?[bB]?", re.ASCII)
UNIT_EXPONENTS = {"k": 1, "m": 2, "g": 3, "t": 4, "p": 5}


def parse_size(value: str) -> int:
    """
    Parses a human readable size with binary units into a number of bytes.
    Raises ValueError if the string is not a size.
    """
    match = SIZE_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"invalid size: '{value}'")

    number, unit = match.groups()
    multiplier = 1024 ** UNIT_EXPONENTS[unit.lower()] if unit else 1
    return int(float(number) * multiplier)


def parse_params(raw: str) -> VolumeParams:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"unable to unmarshal json: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("unable to unmarshal json: expected an object")

    try:
        return VolumeParams.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(f"unable to unmarshal json: {e}") from e


def validate_dataset(dataset: str) -> str:
    if not dataset:
        raise ValidationError("dataset is required")

    if dataset.startswith("/"):
        raise ValidationError(f"dataset must be a relative path: {dataset}")

    for part in dataset.split("/"):
        if part in ("", ".", ".."):
            raise ValidationError(f"invalid dataset name: {dataset}")
    return dataset


def build_request(raw: str) -> VolumeRequest:
    """Request carrying only the dataset, for calls that never provision."""
    params = parse_params(raw)
    return VolumeRequest(dataset=validate_dataset(params.dataset))


def build_provisioning_request(raw: str) -> VolumeRequest:
    """
    Normalizes the attach payload. Checks run in order and the first failure
    wins: JSON, dataset, quota presence, quota size, quota > 0, reservation
    size, quota >= reservation.
    """
    params = parse_params(raw)
    dataset = validate_dataset(params.dataset)

    if not params.quota:
        raise ValidationError("quota is required")

    reservation_str = params.reservation or "0"

    try:
        quota = parse_size(params.quota)
    except ValueError as e:
        raise ParseError(f"unable to parse quota: {e}") from e
    if quota <= 0:
        raise ValidationError("quota must be greater than 0")

    try:
        reservation = parse_size(reservation_str)
    except ValueError as e:
        raise ParseError(f"unable to parse reservation: {e}") from e

    if quota < reservation:
        raise ValidationError("quota must be greater than or equal to reservation")

    return VolumeRequest(
        dataset=dataset,
        quota=quota,
        reservation=reservation,
        compression=params.compression or None,
    )
