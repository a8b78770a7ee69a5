# comrelay

A library of building blocks for a relay that watches EVM chains and passes
on what it sees to community apps. It has no command-line tool; import the
modules you need.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `comrelay.crypto`

- `keccak256(data)` returns the 32-byte Keccak-256 digest.
- `hex_to_address(addr)` turns a hex string into 20 address bytes. It keeps the
  trailing bytes and stops at the first character that is not hex.
- `checksum_address(addr)` returns the mixed-case checksummed form. Input that
  cannot be read gives the zero address.
- `is_same_hex_address(a, b)` compares two addresses without regard to case.
- `hex_to_big_int(hex_str)` parses base 16 and returns 0 for anything it cannot
  parse.
- `hex_to_private_key(private_key_hex)` and `generate_private_key()` return
  secp256k1 keys from the `cryptography` library. A bad key raises `ValueError`.
- `private_key_to_public_key(private_key_hex)` returns the public key's X
  coordinate as a decimal string.
- `generate_hex_private_key()` returns `(hex_scalar, checksummed_address)`.

### `comrelay.event`

`Event` holds an event signature. `ArgType` gives one argument's type and
whether it is indexed.

- `parse_event_signature()` returns `(name, arg_names, arg_types)`. It accepts
  named and unnamed arguments, the `indexed` keyword before or after the type,
  and `index_topic_N` prefixes. An unnamed argument is named after its position.
- `get_topic0_from_event_signature()` returns the 32-byte topic hash, or 32 zero
  bytes when the signature cannot be used.
- `construct_abi_from_event_signature()` returns a one-event JSON ABI string. It
  raises `ValueError("event name is required")` when there is no name or no
  argument.
- `is_valid_data(data)` is true when the mapping has exactly the argument names
  plus `topic`.

### `comrelay.topic`

- `Topic` has `convert_hash_to_value(hash_bytes)`, which reads bool, address,
  string and bytes hashes, signed and unsigned integers, and fixed-size bytes
  from an indexed topic. It also has `json_value()`.
- `Topics` is a list of `Topic` with `to_dict()`, `to_json()`, `str()` and
  `generate_topic_query(start)`.
- `parse_topics_from_hashes(event, topic_hashes, data)` decodes a log. The first
  hash is the event topic. Indexed arguments come from the hashes that follow,
  and the other arguments are ABI-decoded from `data`.
- `parse_jsonb_filters(query, prefix)` collects `prefix.field=value` parameters
  and keeps the first value of each.
- `generate_jsonb_query(prefix, start, data)` builds
  `<prefix>data->>'key' = $n` clauses joined by `AND` and returns them with the
  values.

### `comrelay.legacylog`

`LegacyLog` is a transfer log whose `data` and `extra_data` are raw JSON. Its
methods are:

- `generate_unique_hash(chain_id)`
- `to_rounded(decimals)`
- `update(other)`
- `get_pool_topic()`, which returns `<to>/<topic>` in lower case
- `to_dict()` and `to_json()`
- `to_ws_message(message_type)`
- `matches_query(query)`, which matches `data.field=value` parameters

The module also has `LegacyLogStatus`, `legacy_log_status_from_string`,
`sorted_json_bytes`, `WSMessageType`, `WSMessageDataType` and `WSMessageLog`.

### `comrelay.userop`

- `UserOp` is a user operation. It reads and writes the hex JSON form through
  `to_dict`, `from_dict`, `to_json`, `from_json` and `copy`. A field that fails
  to decode is left as `None`.
- The module defines the function selectors `FUNC_SIG_SINGLE`, `FUNC_SIG_BATCH`
  and `FUNC_SIG_SAFE_EXEC_FROM_MODULE`.
- It also defines `IMPLEMENTATION_STORAGE_SLOT_KEY`.

### `comrelay.nonce`

`Nonce(seq, key)` has `to_int()` and `to_hex()`.

- `new_nonce()` returns a nonce with sequence 0 and a random key that contains
  the current time.
- `parse_nonce(nonce)` splits an integer back into a `Nonce`.

### `comrelay.secrets`

- `encrypt(secret_value, key)` encrypts with AES-CFB. The AES key comes from a
  hex secp256k1 private key. The result is the hex of the IV followed by the
  ciphertext.
- `decrypt(encrypted_value, key)` reverses `encrypt`.
- `generate_key()` returns 32 random bytes.

### `comrelay.image`

`parse_image(file)` decodes an image from a file object or bytes. It returns
`SizedImages` with copies 512, 256 and 128 pixels wide, encoded in the
original's format. JPEG, PNG and GIF are supported; any other format raises
`ValueError`. The module also has `resize_image`, `image_to_bytes` and
`ImageFormat`.

### `comrelay.jsonrpc`

- Types: `JsonRPCRequest` with `is_valid()`, `JSONRPCError`, `JsonRPCResponse`
  with `to_dict()`, `RPCError`, `ResponseType` and `Pagination`.
- Reply builders: `body`, `body_multiple`, `streamed_body`, `jsonrpc_body` and
  `jsonrpc_multi_body`. Each returns an `HttpReply` with `body`, `headers` and
  `status`.
- `RPCError` keeps its own code in a reply. Any other exception gets `-32000`.

### `comrelay.queue`

`Message` is a queued work item that can carry a `ResponseChannel`.

- `respond(data, error)` sends a response on the channel.
- `wait_for_response(timeout=14.0)` returns the data or raises the error. It
  raises `TimeoutError` after the timeout and closes the channel afterwards.
- `new_message(...)` creates a `Message`.
- `new_tx_message(chain_id, event, extra_data)` wraps the data in a
  `UserOpMessage` whose id is `userop:<chain id><event id>`.

### `comrelay.push`

The module defines `PushToken` and `PushMessage`. These functions build the
messages:

- `new_anonymous_push_message(...)`
- `new_silent_push_message(...)`
- `new_push_message(...)`

### `comrelay.webhook`

`Messager(base_url, server_name, enabled=True, timeout=10.0)` posts
`{"content": "[server] ..."}` as JSON.

- `notify(message)` posts a plain message.
- `notify_warning(error)` posts the error prefixed with `warning:`.
- `notify_error(error)` posts the error prefixed with `error:`.

When it is disabled, it does nothing. Any status other than 200 raises
`WebhookError`.

### `comrelay.ws`

`ConnectionPool` groups the clients of one topic by the query string they
connected with. `ConnectionPools` keeps one pool per topic.

- `broadcast_message(message_type, creator)` on `ConnectionPools` sends a
  `LegacyLog`'s websocket message to every query it matches.
- A connection is any object with `send(bytes)`, `receive()` and `close()`, and
  optionally `ping()`.

### `comrelay.models`, `comrelay.context`, `comrelay.version`

- `comrelay.models` has the community configuration dataclasses. The main one is
  `CommunityConfig`, with `to_dict()` and `from_dict()`. It also has `Profile`
  and `Sponsor`.
- `comrelay.context` has `request_context(address, signature)`, a context
  manager, and `get_context_address()`.
- `comrelay.version` has `VERSION` and `VersionService.current()`.

## Example

```python
from comrelay.event import Event

event = Event(event_signature="Transfer(address indexed from, address indexed to, uint256 value)")
name, args, types = event.parse_event_signature()
print(name, args)  # Transfer ['from', 'to', 'value']
print(event.get_topic0_from_event_signature().hex())
# ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef
```

## What it does not do

This is a library, not a running relay. It does not include:

- an HTTP or websocket server, or request routing;
- a blockchain client for talking to a node or sending transactions;
- database storage for events, logs or sponsors;
- a delivery service for push notifications.

The websocket pools work with connection objects that you supply. The reply
builders return `HttpReply` values for your own web framework to send.