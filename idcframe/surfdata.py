"""Weather station observations: loading station parameters, generating
minute observations, writing them as CSV, XML or JSON, and parsing the
records of such files back."""

from __future__ import annotations

import contextlib
import os
import random
import re
import sys
from dataclasses import dataclass

from idcframe.fileio import InFile, LogFile, OutFile
from idcframe.heartbeat import ProcessHeartbeat
from idcframe.textutil import CmdStr, get_xml
from idcframe.timeutil import local_time

__all__ = [
    "Station",
    "Observation",
    "ObservationRecord",
    "load_stations",
    "generate_observations",
    "write_observations",
    "parse_observation",
    "main",
]

FORMATS = ("csv", "xml", "json")
CSV_HEADER = "站点代码,数据时间,气温,气压,相对湿度,风向,风速,降雨量,能见度\n"

_ATOF = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_USAGE = """\
Using:./crtsurfdata inifile outpath logfile datafmt
Example:crtsurfdata /project/idc/ini/stcode.ini /tmp/idc/surfdata /log/idc/crtsurfdata.log csv,xml,json

Generates minute observation data for weather stations; meant to run once a minute.
inifile  station parameter file.
outpath  directory for the generated data files.
logfile  log file of this program.
datafmt  output formats, any of csv, xml and json separated by commas.
"""


@dataclass
class Station:
    """Parameters of one weather station."""

    provname: str = ""
    obtid: str = ""
    obtname: str = ""
    lat: float = 0.0
    lon: float = 0.0
    height: float = 0.0


@dataclass
class Observation:
    """One minute observation; measures are integers in tenths of their unit
    except humidity ``u`` and wind direction ``wd``."""

    obtid: str
    ddatetime: str
    t: int
    p: int
    u: int
    wd: int
    wf: int
    r: int
    vis: int

    def to_csv(self) -> str:
        return (
            f"{self.obtid},{self.ddatetime},{self.t / 10:.1f},{self.p / 10:.1f},"
            f"{self.u},{self.wd},{self.wf / 10:.1f},{self.r / 10:.1f},{self.vis / 10:.1f}\n"
        )

    def to_xml(self) -> str:
        return (
            f"<obtid>{self.obtid}</obtid><ddatetime>{self.ddatetime}</ddatetime>"
            f"<t>{self.t / 10:.1f}</t><p>{self.p / 10:.1f}</p><u>{self.u}</u>"
            f"<wd>{self.wd}</wd><wf>{self.wf / 10:.1f}</wf><r>{self.r / 10:.1f}</r>"
            f"<vis>{self.vis / 10:.1f}</vis><endl/>\n"
        )

    def to_json(self) -> str:
        return (
            f'{{"obtid":"{self.obtid}","ddatetime":"{self.ddatetime}",'
            f'"t":"{self.t / 10:.1f}","p":"{self.p / 10:.1f}",'
            f'"u":"{self.u}","wd":"{self.wd}","wf":"{self.wf / 10:.1f}",'
            f'"r":"{self.r / 10:.1f}","vis":"{self.vis / 10:.1f}"}}'
        )


@dataclass
class ObservationRecord:
    """An observation parsed from a data file line, ready to be stored.

    Every value is text; measures are scaled back to integer tenths and are
    empty when the line did not hold them.
    """

    obtid: str = ""
    ddatetime: str = ""
    t: str = ""
    p: str = ""
    u: str = ""
    wd: str = ""
    wf: str = ""
    r: str = ""
    vis: str = ""
    line: str = ""


def _cmd_field(cmd: CmdStr, index: int, length: int = 0) -> str:
    return cmd.get_str(index, length) if index < len(cmd) else ""


def _cmd_float(cmd: CmdStr, index: int) -> float:
    try:
        return cmd.get_float(index)
    except (IndexError, ValueError):
        return 0.0


def load_stations(inifile: str) -> list[Station]:
    """Read the station file; the first line is a title and is skipped.

    Each line reads ``province,obtid,name,lat,lon,height``.
    """
    stations: list[Station] = []
    cmd = CmdStr()
    with InFile() as fin:
        fin.open(inifile)
        fin.read_line()
        for line in fin:
            cmd.split(line, ",")
            stations.append(
                Station(
                    provname=_cmd_field(cmd, 0, 30),
                    obtid=_cmd_field(cmd, 1, 10),
                    obtname=_cmd_field(cmd, 2, 30),
                    lat=_cmd_float(cmd, 3),
                    lon=_cmd_float(cmd, 4),
                    height=_cmd_float(cmd, 5),
                )
            )
    return stations


def generate_observations(
    stations: list[Station], ddatetime: str, rng: random.Random | None = None
) -> list[Observation]:
    """Make one random observation per station at ``ddatetime``."""
    rng = rng or random.Random()
    return [
        Observation(
            obtid=station.obtid,
            ddatetime=ddatetime,
            t=rng.randrange(350),
            p=rng.randrange(265) + 10000,
            u=rng.randrange(101),
            wd=rng.randrange(360),
            wf=rng.randrange(150),
            r=rng.randrange(16),
            vis=rng.randrange(5001) + 100000,
        )
        for station in stations
    ]


def write_observations(
    observations: list[Observation], outpath: str, fmt: str, ddatetime: str
) -> str:
    """Write the observations to ``SURF_ZH_<ddatetime>_<pid>.<fmt>`` in
    ``outpath`` and return the file name. ``fmt`` is csv, xml or json."""
    if fmt not in FORMATS:
        raise ValueError(f"unsupported data format {fmt!r}")
    filename = f"{outpath}/SURF_ZH_{ddatetime}_{os.getpid()}.{fmt}"
    with OutFile() as ofile:
        ofile.open(filename)
        if fmt == "csv":
            ofile.write(CSV_HEADER)
            for obs in observations:
                ofile.write(obs.to_csv())
        elif fmt == "xml":
            ofile.write("<data>\n")
            for obs in observations:
                ofile.write(obs.to_xml())
            ofile.write("</data>\n")
        else:
            ofile.write('{"data":[\n')
            last = len(observations) - 1
            for index, obs in enumerate(observations):
                ofile.write(obs.to_json())
                ofile.write(",\n" if index < last else "\n")
            ofile.write("]}\n")
    return filename


def _atof(text: str) -> float:
    match = _ATOF.match(text)
    return float(match.group()) if match else 0.0


def _tenths(text: str) -> str:
    if not text:
        return ""
    return str(int(_atof(text) * 10))[:9]


def _xml_field(line: str, field: str, length: int) -> str:
    try:
        return get_xml(line, field, length)
    except KeyError:
        return ""


def parse_observation(line: str, is_xml: bool) -> ObservationRecord:
    """Parse one XML record or CSV line of an observation file."""
    if is_xml:
        def field(name: str, index: int, length: int) -> str:
            return _xml_field(line, name, length)
    else:
        cmd = CmdStr(line, ",")

        def field(name: str, index: int, length: int) -> str:
            return _cmd_field(cmd, index, length)

    return ObservationRecord(
        obtid=field("obtid", 0, 5),
        ddatetime=field("ddatetime", 1, 14),
        t=_tenths(field("t", 2, 10)),
        p=_tenths(field("p", 3, 10)),
        u=field("u", 4, 10),
        wd=field("wd", 5, 10),
        wf=_tenths(field("wf", 6, 10)),
        r=_tenths(field("r", 7, 10)),
        vis=_tenths(field("vis", 8, 10)),
        line=line,
    )


def main(argv: list[str] | None = None) -> int:
    """Generate one minute of observation files; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 4:
        print(_USAGE)
        return -1
    inifile, outpath, logname, datafmt = args

    heartbeat = ProcessHeartbeat()
    with contextlib.suppress(OSError, RuntimeError):
        heartbeat.add(10, "crtsurfdata")

    logfile = LogFile()
    try:
        try:
            logfile.open(logname)
        except OSError:
            print(f"logfile.open({logname}) failed.")
            return -1
        logfile.write("crtsurfdata started.\n")
        try:
            stations = load_stations(inifile)
        except OSError:
            logfile.write("open(%s) failed.\n", inifile)
            logfile.write("program exits, sig=%d\n\n", -1)
            return 0

        ddatetime = local_time("yyyymmddhh24miss")[:12] + "00"
        observations = generate_observations(stations, ddatetime)
        for fmt in FORMATS:
            if fmt in datafmt:
                try:
                    filename = write_observations(observations, outpath, fmt, ddatetime)
                except OSError as exc:
                    logfile.write("writing %s data failed: %s\n", fmt, exc)
                    continue
                logfile.write(
                    "created data file %s, time %s, records %d.\n",
                    filename, ddatetime, len(observations),
                )
        logfile.write("crtsurfdata finished.\n")
        return 0
    finally:
        logfile.close()
        heartbeat.close()