"""Protobuf messages for the subset of the TRON transaction envelope we sign.

Field numbers follow core/Tron.proto and core/contract/*.proto of java-tron.
The messages are declared through a descriptor instead of generated code so
only the fields the wallet writes are carried.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_Field = descriptor_pb2.FieldDescriptorProto

PACKAGE = "protocol"
TYPE_URL_PREFIX = "type.googleapis.com/protocol."

TRANSFER_CONTRACT = 1
TRIGGER_SMART_CONTRACT = 31

_MESSAGES = {
    "TransferContract": [
        ("owner_address", 1, _Field.TYPE_BYTES),
        ("to_address", 2, _Field.TYPE_BYTES),
        ("amount", 3, _Field.TYPE_INT64),
    ],
    "TriggerSmartContract": [
        ("owner_address", 1, _Field.TYPE_BYTES),
        ("contract_address", 2, _Field.TYPE_BYTES),
        ("call_value", 3, _Field.TYPE_INT64),
        ("data", 4, _Field.TYPE_BYTES),
        ("call_token_value", 5, _Field.TYPE_INT64),
        ("token_id", 6, _Field.TYPE_INT64),
    ],
    # Wire-compatible with google.protobuf.Any.
    "Any": [
        ("type_url", 1, _Field.TYPE_STRING),
        ("value", 2, _Field.TYPE_BYTES),
    ],
    "Contract": [
        ("type", 1, _Field.TYPE_INT32),
        ("parameter", 2, ".protocol.Any"),
        ("provider", 3, _Field.TYPE_BYTES),
        ("ContractName", 4, _Field.TYPE_BYTES),
        ("Permission_id", 5, _Field.TYPE_INT32),
    ],
    "TransactionRaw": [
        ("ref_block_bytes", 1, _Field.TYPE_BYTES),
        ("ref_block_num", 3, _Field.TYPE_INT64),
        ("ref_block_hash", 4, _Field.TYPE_BYTES),
        ("expiration", 8, _Field.TYPE_INT64),
        ("data", 10, _Field.TYPE_BYTES),
        ("contract", 11, ".protocol.Contract", "repeated"),
        ("scripts", 12, _Field.TYPE_BYTES),
        ("timestamp", 14, _Field.TYPE_INT64),
        ("fee_limit", 18, _Field.TYPE_INT64),
    ],
    "Transaction": [
        ("raw_data", 1, ".protocol.TransactionRaw"),
        ("signature", 2, _Field.TYPE_BYTES, "repeated"),
    ],
}


def _file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="tron_wallet/protocol.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _MESSAGES.items():
        message = file_proto.message_type.add(name=message_name)
        for spec in fields:
            name, number, kind = spec[:3]
            repeated = len(spec) > 3
            field = message.field.add(
                name=name,
                number=number,
                label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
            )
            if isinstance(kind, str):
                field.type = _Field.TYPE_MESSAGE
                field.type_name = kind
            else:
                field.type = kind
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


TransferContract = _message_class("TransferContract")
TriggerSmartContract = _message_class("TriggerSmartContract")
AnyParameter = _message_class("Any")
Contract = _message_class("Contract")
TransactionRaw = _message_class("TransactionRaw")
Transaction = _message_class("Transaction")


def pack_contract(contract_type: int, type_name: str, parameter) -> "Contract":
    return Contract(
        type=contract_type,
        parameter=AnyParameter(
            type_url=TYPE_URL_PREFIX + type_name,
            value=parameter.SerializeToString(),
        ),
    )
