# asl

A collection of small, general-purpose building blocks:

| Module | What it holds |
| --- | --- |
| `asl.sha1` | `Sha1` incremental hasher and `sha1_hash()` |
| `asl.path` | `Path`: name, extension, directory, `..` removal, absolute paths |
| `asl.factory` | `Factory`, `factory_for()` and the `register()` class decorator |
| `asl.testing` | `TestRegistry`, the `test` decorator, `distance()` and `main()` |
| `asl.matrix4` | `Matrix4`, `Quaternion` and `orthonormalize()` |
| `asl.process` | `Process` and the helpers `env`, `set_env`, `my_pid`, `my_path`, `my_dir` |
| `asl.log` | `Log`, `Level` and `log()` |
| `asl.inifile` | `IniFile`, which reads and rewrites INI files keeping their layout |
| `asl.address` | `InetAddress`, `AddressType`, `SocketError`, `SocketException`, `parse_host_port()` |
| `asl.sockets` | `Socket` (TCP), `PacketSocket` (UDP), `LocalSocket`, `SocketSet` |
| `asl.multicast` | `MulticastSocket` |
| `asl.server` | `SocketServer`, a base class for threaded socket servers |
| `asl.serialport` | `SerialPort` |
| `asl.sharedmem` | `SharedMem`, a named shared memory block |

Requires Python 3.10 or later. The only third-party dependency is `pyserial`.

## SHA-1

```python
from asl.sha1 import Sha1, sha1_hash

h = Sha1()
h.update(b"abc")
h.hexdigest()          # "a9993e364706816aba3e25717850c26c9cd0d89d"
sha1_hash("abc")       # the same digest as 20 bytes; text is encoded as UTF-8
```

## Paths

```python
from asl.path import Path

p = Path("docs/report.final.txt")
p.name()                      # "report.final.txt"
p.extension()                 # "txt"
p.has_extension("md|txt")     # True (case-insensitive)
p.directory()                 # Path("docs")
p.no_ext()                    # Path("docs/report.final")
Path("/a/b/../c/./d").remove_ddots()   # Path("/a/c/d")
```

## Factories

```python
from asl.factory import factory_for, register

class Animal:
    pass

@register(Animal, "Dog")
class Dog(Animal):
    pass

animals = factory_for(Animal)
dog = animals.create("Dog")     # None for an unknown name
animals.catalog()               # ["Dog"]
animals.set_class_info("Dog", {"legs": 4})
animals.class_info("Dog")       # {"legs": "4"}
```

## A tiny test registry

Tests are functions that receive the registry and record failures through its
checks instead of stopping:

```python
from asl.testing import TestRegistry

tests = TestRegistry()

def volume(t):
    t.expect(2 + 2, "==", 4)
    t.expect_near(3.14159, 3.1416, 1e-3)
    t.check(len("abc") == 3, "length")

tests.add("volume", volume)
tests.run_all()     # prints each result, returns True if none failed
```

The `test` decorator adds a function to a default registry, and
`asl.testing.main()` runs that registry's tests (all, or those named) and
returns the number that failed.

## Matrices

```python
import math
from asl.matrix4 import Matrix4

m = Matrix4.translate(10, 4, 0) * Matrix4.rotate_x(math.pi / 2)
p = m.transform_point((1, 0, 0))
r = Matrix4.rotate_e((0.1, 0.2, 0.3), "XYZ*")   # "*" means fixed axes
angles = r.euler_angles("XYZ*")
q = r.rotation()                                 # a Quaternion
inv = m.inverse()
```

## Running programs

```python
from asl.process import Process

proc = Process.execute("python3", ["-c", "print('hello')"])
proc.output()        # "hello\n"
proc.exit_status()   # 0
```

`Process().run(command, args)` starts a program without waiting; its output can
then be read with `read_output()` or `read_output_line()` (which returns `"\n"`
at end of output), and `wait()` returns the exit status.

## Logging

```python
from asl.log import Level, Log, log

Log.instance().set_file("app.log")
log(__file__, Level.WARNING, "Cannot load file %s", "data.bin")
```

Lines look like `[date time][category] WARNING: message`. Only the base name of
the category is kept, so a file path can be used. Messages above the maximum
level (`Level.DEBUG` by default) are dropped. When the log file grows over
1,000,000 bytes it is renamed to `name-1.ext` and a new one started. The
settings are kept in the `ASL_LOG` environment variable, so child processes
share them.

## INI files

```python
from asl.inifile import IniFile

with IniFile("settings.ini", True) as ini:
    ini.section("network")
    port = ini["port"]               # key in the current section, "" if missing
    ini["display/width"] = "1024"    # "section/key" addresses any section
```

When opened for writing, changes are written back on close, keeping the
existing lines, comments and indentation; new keys are added at the end of their
section and new sections at the end of the file.

## Sockets

```python
from asl.sockets import Socket

with Socket() as sock:
    sock.connect("localhost", 8000)
    sock.write(b"getname\n")
    answer = sock.read_line()
```

Sockets do not raise on network failures: operations return `False`, `-1` or
empty data and record an error readable with `error()` and `error_msg()`.

UDP and multicast:

```python
from asl.address import InetAddress
from asl.multicast import MulticastSocket

group = InetAddress("224.0.1.1", 18000)
receiver = MulticastSocket()
receiver.join(group)             # binds to the group's port first
data, sender = receiver.read_from(1000)
receiver.leave(group)
```

A server is made by subclassing `SocketServer` and implementing `serve()`; the
client socket is closed when `serve()` returns:

```python
from asl.server import SocketServer

class Echo(SocketServer):
    def serve(self, client):
        client.write(client.read_line().encode() + b"\n")

server = Echo()
server.bind("127.0.0.1", 9000)
server.start(True)   # run in a background thread
...
server.stop(True)    # wait for the loop and all clients to finish
```

## Serial ports and shared memory

```python
from asl.serialport import SerialPort

with SerialPort() as port:
    port.open("loop://")        # a device name or a pyserial URL
    port.config(9600, "8N1")
    port.set_line_end("\r\n")
    port.write("hello\r\n")
    port.read_line()            # "hello"
```

```python
from asl.sharedmem import SharedMem

with SharedMem("demo_block", 1024) as mem:
    buf = mem.buffer()
    buf[:5] = b"hello"
    buf.release()               # release views before the block is closed
```

## What this package does not do

There is no HTTP or WebSocket client or server, no TLS-encrypted sockets, and
no JSON, XML or other data-format parsing here. There is no command-line
program either; everything is used as a library.