# idcframe

Building blocks for back-office data-exchange services, plus a small
generator of surface weather observation files. It needs only the Python
standard library and runs on POSIX systems (the heartbeat table uses
`fcntl` file locks).

## Modules

- **`idcframe.textutil`**: trimming (`delete_lchr`, `delete_rchr`,
  `delete_lrchr`), ASCII case conversion (`to_upper`, `to_lower`),
  `replace_str`, `pick_number`, comma-separated `*` wildcard matching that
  ignores case (`match_str`), delimited-field splitting (`CmdStr`) and tag
  extraction from XML-like records (`get_xml`, `get_xml_int`,
  `get_xml_uint`, `get_xml_float`, `get_xml_bool`; a missing tag raises
  `KeyError`).
- **`idcframe.timeutil`**: `format_time`, `local_time`, `str_to_time` and
  `add_time` convert between Unix timestamps and local-time strings in
  formats such as `yyyy-mm-dd hh24:mi:ss` (the default) and
  `yyyymmddhh24miss`. An unknown format or a malformed time raises
  `ValueError`. `Timer.elapsed()` returns the seconds since the last reading
  and then starts counting again.
- **`idcframe.fileutil`**: `make_dirs`, `file_size`, `file_mtime`,
  `set_mtime`, `rename_file` (creates the target's directories first) and
  `copy_file` (copies through a `.tmp` file and keeps the source's mtime).
  `DirReader` lists the files that match a set of rules, optionally
  recursing and sorting, and yields `FileEntry` records.
- **`idcframe.fileio`**: `OutFile` writes to `<name>.tmp` and renames it into
  place with `close_and_rename()`. Used as a context manager, it renames on
  success and removes the temporary file on error. `InFile` reads records
  line by line, or joins lines up to an end marker such as `<endl/>`.
  `LogFile.write(fmt, *args)` writes `fmt % args` after the local time and,
  when backups are on, rotates the file once it grows past `max_size_mb`
  megabytes.
- **`idcframe.net`**: raw and length-prefixed TCP I/O. A message is a 4-byte
  little-endian length followed by the body. The functions are
  `read_exactly`, `write_all`, `tcp_read`, `tcp_read_bytes`, `tcp_write` and
  `tcp_write_bytes`, with `TcpClient` and `TcpServer` built on them. A
  timeout of `0` waits forever, `-1` does not wait, and a positive value
  waits that many seconds before raising `TimeoutError`.
- **`idcframe.ringqueue`**: `RingQueue`, a fixed-capacity FIFO. `push` on a
  full queue raises `OverflowError`; `pop` and `front` on an empty one raise
  `IndexError`.
- **`idcframe.heartbeat`**: `ProcessHeartbeat` registers the current process
  (pid, name, timeout, last beat time) in a shared memory-mapped table file
  of 1000 slots. `update()` refreshes the beat and `close()` removes the
  entry. `list_processes` reads the table back as `ProcInfo` records.
- **`idcframe.ftp`**: `FtpClient`, built on `ftplib`. `get` downloads through
  `<local>.tmp` and can check that the remote mtime did not change during the
  transfer. `put` uploads through `<remote>.tmp`, then renames it, and can
  check the uploaded size. Failures raise `FtpError`; its `stage` tells
  whether a login failed at `connect`, `login` or `option`.
- **`idcframe.surfdata`**: `load_stations`, `generate_observations`,
  `write_observations` and `parse_observation`, and the `crtsurfdata`
  command.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Splitting and matching text:

```python
from idcframe.textutil import CmdStr, match_str, get_xml, get_xml_float

fields = CmdStr("messi,10,striker,30,1.72,68.5,Barcelona", ",", False)
name = fields[0]             # "messi"
number = fields.get_int(1)   # 10
height = fields.get_float(4) # 1.72

match_str("SURF_ZH_20240101120000_1.csv", "*.xml,*.csv")   # True

record = "<obtid>58015</obtid><t>23.5</t><endl/>"
get_xml(record, "obtid", 0)       # "58015"
get_xml_float(record, "t")        # 23.5
```

Working with times:

```python
from idcframe.timeutil import local_time, add_time, Timer

now = local_time("yyyymmddhh24miss", 0)
later = add_time(now, 60, "yyyy-mm-dd hh24:mi:ss")

timer = Timer()
# ... do some work ...
print(f"took {timer.elapsed():.2f}s")
```

Listing a directory and writing files safely:

```python
from idcframe.fileutil import DirReader
from idcframe.fileio import OutFile

reader = DirReader("yyyymmddhh24miss")
reader.open("/tmp/idc/surfdata", "*.xml,*.csv", 10000, False, True)
for entry in reader:
    print(entry.ffilename, entry.filesize, entry.mtime)

with OutFile() as out:
    out.open("/tmp/idc/out/result.txt", True, "w", True)
    out.write("hello\n")
# result.txt.tmp has been renamed to result.txt
```

Transferring a file over FTP:

```python
from idcframe.ftp import FtpClient, FtpError

password = "password"
client = FtpClient()
try:
    client.login("127.0.0.1:21", "user", password=password)
    client.get("/remote/data.csv", "/tmp/local/data.csv", True)
except FtpError as exc:
    print("transfer failed:", exc, exc.stage)
finally:
    client.logout()
```

## Generating surface observation data

The `crtsurfdata` command reads a station file and generates one minute of
random observations for every station. It writes them in any of the formats
`csv`, `xml` and `json`, given as a comma-separated list:

```
crtsurfdata /project/idc/ini/stcode.ini /tmp/idc/surfdata /tmp/log/crtsurfdata.log csv,xml,json
```

The station file has a title line, which is skipped, followed by one line
per station:

```
province,station id,station name,latitude,longitude,altitude
Anhui,58015,Dangshan,34.27,116.2,44.2
```

Output files are named `SURF_ZH_<yyyymmddhh24mi00>_<pid>.<fmt>`. Each one is
written under a `.tmp` name and renamed once complete. The command logs its
progress to the given log file. It also registers a heartbeat in the default
heartbeat table, and it skips that step if the table cannot be used. Given
the wrong number of arguments, it prints its usage and exits with status -1.

From Python, the same steps are `load_stations`, `generate_observations`
(pass a `random.Random` for repeatable data) and `write_observations`.
`parse_observation(line, is_xml)` reads a csv line or xml record back into
an `ObservationRecord`. Its values are text, with the measures scaled back
to integer tenths.

## What it does not do

- There is no database layer. `ObservationRecord` holds parsed observations
  ready to be stored, but storing them is left to the caller.
- There is no supervisor for the heartbeat table. `list_processes` reports
  the registered processes, but nothing here restarts or stops processes
  whose heartbeat has timed out.
- There is no FTP or TCP file-transfer command. `FtpClient`, `TcpClient` and
  `TcpServer` are libraries to build such tools with.