"""Request assembly and response streaming for a Responses-style model API.

Module Overview
---------------
This package contains the following components:

**environment_context.py**
    Per-turn snapshot of cwd, approval policy and sandbox mode, serialized
    as an ``<environment_context>`` block for the model.

**instructions.py**
    Final instruction text -- bundled base prompt (or an override) plus the
    apply_patch guide for model families that need it.

**reasoning.py**
    Maps reasoning effort/summary configuration to the wire ``reasoning``
    parameter, gated on model capability.

**prompt_assembler.py**
    ``Prompt`` (turn inputs), ``PromptAssembler`` (ordered input sequence
    and request envelope) and ``ResponsesApiRequest``.

**response_stream.py** / **events.py**
    Bounded producer/consumer channel delivering typed ``ResponseEvent``
    values to a single async consumer.

**sse.py**
    Decodes the server-sent-event reply into ``ResponseEvent`` values and
    drives the producer side of the stream.

**terminal.py**
    Process-wide, lazily computed terminal label for the User-Agent header.

**config.py**
    config.yaml / .env loading and validation.

Architecture
------------
1. **Pure assembly**: request building never mutates its inputs and does
   no I/O beyond the bundled instruction files read at import.

2. **Errors as stream items**: transport and protocol failures reach the
   consumer through the event stream, never as crashes in the reader task.

3. **Transport outside**: HTTP, authentication and retries belong to the
   caller's transport (see ``transport.ResponsesTransport``).
"""
