# syncworks

Building blocks for concurrent programs, in plain Python with no third-party
dependencies.

- **`syncworks.adt`** – map and set interfaces (`SequentialMap`,
  `ConcurrentMap`, `NonblockingMap`, `ConcurrentSet`), the adapters
  `LockedMap` (a `SequentialMap` behind one lock) and
  `NonblockingConcurrentMap` (a `NonblockingMap` seen as a `ConcurrentMap`,
  whose `delete` returns a copy), `KeyExistsError`, and `AtomicCell`, a cell
  with `load`, `store`, `swap` and an identity-based `compare_exchange`.
- **`syncworks.stack`** – Treiber's lock-free stack (`TreiberStack`) and an
  elimination-backoff stack (`ElimStack`) layered on another stack. Single
  attempts (`try_push`, `try_pop`) raise `CasFailed` when they lose a race;
  `push` and `pop` retry.
- **`syncworks.arc`** – `Arc`, an explicitly reference-counted shared value
  with `clone`, `drop`, `count`, `ptr_eq`, `get_mut`, `set`,
  clone-on-write `make_mut` and `try_unwrap`.
- **`syncworks.hazard`** and **`syncworks.retire`** – hazard pointers:
  `HazardBag`, `Shield`, `RetiredSet`, the default bag `HAZARDS`, and the
  module-level `retire(pointer, free)` / `collect()` helpers that use a
  per-thread retired set.
- **`syncworks.growable_array`** – `GrowableArray`, whose `get(index)` returns
  an `AtomicCell`, growing its tree of segments on demand.
- **`syncworks.cache`**, **`syncworks.thread_pool`**, **`syncworks.tcp`**,
  **`syncworks.handler`**, **`syncworks.statistics`**, **`syncworks.server`** –
  a tiny HTTP "hello" server built from a compute-once `Cache`, a joining
  `ThreadPool`, a `CancellableTcpListener`, a `Handler` and `Statistics`.

## Examples

### Compute-once cache

```python
from syncworks.cache import Cache

cache = Cache()
cache.get_or_insert_with("dog", lambda key: key.upper())  # computes "DOG"
cache.get_or_insert_with("dog", lambda key: "never run")  # returns cached "DOG"
```

Calls for different keys do not block each other, and for one key the
function runs once even when several threads ask at the same time. If the
function raises, nothing is cached and the error propagates.

### Thread pool

```python
from syncworks.thread_pool import ThreadPool

results = []
with ThreadPool(4) as pool:
    for i in range(10):
        pool.execute(lambda i=i: results.append(i * i))
    pool.join()  # wait until every submitted job has finished
# leaving the block closes the pool and joins all worker threads
```

If any job raised, `close()` (and so leaving the `with` block) raises
`WorkerPanicked`, whose `errors` holds the exceptions. Submitting to a closed
pool raises `RuntimeError`.

### Lock-free stacks

```python
from syncworks.stack import ElimStack, TreiberStack

stack = ElimStack(TreiberStack())
stack.push(1)
stack.push(2)
stack.pop()  # 2
stack.pop()  # 1
stack.is_empty()  # True
stack.pop()  # raises IndexError: the stack is empty
```

### Shared values

```python
from syncworks.arc import Arc

data = Arc(5)
other = data.clone()
data.count()       # 2
data.get_mut()     # None: the value is shared
other.drop()
data.try_unwrap()  # 5
```

### Hazard pointers

```python
from syncworks.adt import AtomicCell
from syncworks.hazard import HazardBag, Shield
from syncworks.retire import RetiredSet

bag = HazardBag()
node = ["some", "shared", "node"]
src = AtomicCell(node)

retired = RetiredSet(bag)
with Shield(bag) as shield:
    protected = shield.protect(src)  # announced as a hazard inside this block
    src.store(None)                  # unlink it
    retired.retire(protected, lambda p: print("freed", p))
    retired.collect()                # still protected: nothing is freed
retired.collect()                    # now it is freed
```

A `RetiredSet` collects automatically once `RetiredSet.THRESHOLD` pointers
are retired; `drain()` collects until everything has been freed.

## The hello server

The package installs one command:

```
syncworks-server [--addr HOST:PORT] [--threads N]
```

It listens on `localhost:7878` by default with a pool of 7 threads (at least
3 are required). A request whose first line is `GET /KEY HTTP/1.1`, with `KEY`
made of word characters, is answered with the result computed for `KEY`; the
first request for a key takes about three seconds, later ones come from the
cache. Any other request gets a 404 page. Press Ctrl-C to stop: the server
stops accepting, finishes the connections already accepted and prints how
many times each key was requested.

`serve(listener, pool, handler)` runs the same loop in your own program and
returns the `Statistics` once the listener is cancelled.

## What it does not do

- There is no concrete concurrent hash map or concurrent set: `syncworks.adt`
  gives the interfaces and adapters, and a map becomes concurrent by wrapping
  your own `SequentialMap` in `LockedMap`.
- The server is a demonstration, not a general HTTP server: it reads at most
  512 bytes of each request, answers one request per connection and closes
  it, and serves no files.

## Running the tests

Install the package with its `test` extra and run pytest from the project
root.