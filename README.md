# rmdecision

Building blocks for the decision layer of a competition robot:

- **Maths and control**: angle differences, sign and clamping helpers
  (`rmdecision.math_utils`), piecewise linear lookup tables
  (`rmdecision.interpolation.LinearInterp`), ramp and minimum-time
  trajectories (`rmdecision.traj_gen.RampTraj`, `MinTimeTraj`), a One Euro
  filter (`rmdecision.one_euro_filter.OneEuroFilter`), a linear Kalman filter
  (`rmdecision.kalman_filter.KalmanFilter`) and an LQR gain solver
  (`rmdecision.lqr.Lqr`, `solve_riccati_arimoto_potter`).
- **Parameters and messages**: lookups in nested parameter mappings
  (`rmdecision.params.get_param`, `xml_rpc_get_double`) and the dataclasses
  exchanged with the referee and controllers (`rmdecision.messages`).
- **Referee-driven limits**: shooter heat limiting
  (`rmdecision.heat_limit.HeatLimit`) and chassis power limiting with
  super-capacitor modes (`rmdecision.power_limit.PowerLimit`).
- **Command senders**: chassis, gimbal and shooter senders
  (`rmdecision.command_sender`) and joint, camera, leg, multi-axis and
  double-barrel senders (`rmdecision.joint_senders`) that turn operator input
  into command messages.
- **Controller orchestration**: background-thread service callers
  (`rmdecision.service_caller`), a controller start/stop batcher
  (`rmdecision.controller_manager.ControllerManager`) and a calibration queue
  (`rmdecision.calibration_queue.CalibrationQueue`).
- **Video transmission link**: CRC-8/CRC-16 checks (`rmdecision.crc`), frame
  layouts (`rmdecision.vt_protocol`) and a serial reader that decodes custom
  controller, keyboard/mouse and receiver control frames
  (`rmdecision.video_transmission.VideoTransmission`).

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

Linear interpolation over a sorted table of points:

```python
from rmdecision.interpolation import LinearInterp

speed_for_power = LinearInterp([[0, 1.0], [100, 2.0]])
speed_for_power.output(50)    # 1.5
speed_for_power.output(500)   # 2.0, clamped to the last point
```

A ramp trajectory with a bounded acceleration:

```python
from rmdecision.traj_gen import RampTraj

traj = RampTraj()
traj.set_limit(2.0)
traj.set_state(0.0, 1.0, 0.0)
if traj.calc(2.0):
    position = traj.get_pos(1.0)
    velocity = traj.get_vel(1.0)
```

Shortest signed difference between two angles:

```python
from rmdecision.math_utils import angular_minus

angular_minus(0.1, 6.2)   # a small positive angle, not about -6.1
```

Frame checksums:

```python
from rmdecision.crc import append_crc16, verify_crc16

frame = append_crc16(b"\x01\x02\x03\x00\x00")
verify_crc16(frame)   # True
```

## Video transmission reader

The `rmdecision-vt` command opens the receiver's serial port
(`--port`, default `/dev/usbImagetran`; `--baudrate`, default 921600), polls
it at `--rate` Hz (default 100) and writes every decoded frame to standard
output as one JSON line of the form `{"topic": ..., "data": ...}`, with
topics `custom_controller_data`, `keyboard_mouse_data` and
`receiver_control_data`:

```
rmdecision-vt --port /dev/ttyUSB0
```

To embed the reader in your own loop, build a
`rmdecision.video_transmission.VideoTransmission` with a serial object (for
example from `open_serial`) and callbacks for the three kinds of decoded
data, then call `read()` periodically. The `is_online` property is set when
a frame with valid checksums is decoded, and cleared by a `read()` that
receives data more than 0.1 s after the last valid frame.

## What this package does not do

It does not carry messages between processes. Senders and limiters take a
parameter mapping and a `publish` callable, service callers take a `client`
callable, and callbacks such as `HeatLimit.timer_callback` or
`Vel2DCommandSender.chassis_cmd_callback` must be called by your own
middleware or loop. Apart from `rmdecision-vt`, there is no command that runs
a robot's decision loop.