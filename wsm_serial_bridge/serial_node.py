#!/usr/bin/env python3

import rclpy
from rclpy.node import Node

from std_msgs.msg import Bool, Empty, Float64, Float64MultiArray
from std_srvs.srv import Trigger

from .exceptions import LinkOpenError, WsmError
from .link import SerialLink, poll
from .speedometer import Speedometer


class SpeedometerNode(Node):

    def __init__(self):
        super().__init__('wsm_serial_bridge')

        # ==================== PARAMETERS ====================
        self.declare_parameter('port', '/dev/ttyUSB0')
        self.declare_parameter('baudrate', 9600)
        self.declare_parameter('poll_hz', 50)

        self.declare_parameter('scale', 120.0)
        self.declare_parameter('wheel_diameter', 8.0)
        self.declare_parameter('ticks_per_revolution', 8)

        self.declare_parameter('long_term_count', 10)
        self.declare_parameter('debug', False)

        # ==================== PARAM READ ====================
        self.port = self.get_parameter('port').value
        self.baudrate = self.get_parameter('baudrate').value
        self.poll_hz = self.get_parameter('poll_hz').value

        self.scale = self.get_parameter('scale').value
        self.wheel_diameter = self.get_parameter('wheel_diameter').value
        self.ticks_per_revolution = self.get_parameter('ticks_per_revolution').value

        self.long_term_count = self.get_parameter('long_term_count').value
        self.debug = self.get_parameter('debug').value

        if self.poll_hz <= 0:
            raise ValueError("poll_hz must be positive")

        # ==================== STATE ====================
        self._dbg_speed = (0.0, 0)
        self._dbg_distance = (0.0, 0)
        self._dbg_battery = (0.0, 0)
        self._dbg_link_errors = 0

        # ==================== DECODER ====================
        self.wsm = Speedometer(
            scale=self.scale,
            wheel_diameter=self.wheel_diameter,
            ticks_per_revolution=self.ticks_per_revolution,
            listener=self,
        )

        # ==================== SERIAL ====================
        self.link = SerialLink(self.port, self.baudrate)
        self._connect_serial()

        # ==================== ROS ====================
        self.speed_pub = self.create_publisher(Float64, 'speed', 10)
        self.distance_pub = self.create_publisher(Float64, 'distance', 10)
        self.battery_pub = self.create_publisher(Float64, 'battery_voltage', 10)
        self.battery_critical_pub = self.create_publisher(Empty, 'battery_critical', 10)
        self.speed_ok_pub = self.create_publisher(Bool, 'speed_ok', 10)
        self.long_term_pub = self.create_publisher(Float64MultiArray, 'long_term', 10)

        self.create_service(Trigger, 'reset_distance', self.reset_distance_callback)
        self.create_service(Trigger, 'start_long_term', self.start_long_term_callback)

        # Polling and services share the executor thread, so the
        # decoder needs no locking.
        self.create_timer(1.0 / float(self.poll_hz), self.serial_poll)

        if self.debug:
            self.create_timer(1.0, self._print_debug_panel)

        self.get_logger().info("wsm_serial_bridge started")

    # =====================================================
    # SERIAL CONNECT
    # =====================================================
    def _connect_serial(self):
        try:
            self.link.open()
        except LinkOpenError as e:
            self.get_logger().error(f"Cannot open {self.port}: {e}")
            raise
        self.get_logger().info(
            f"Serial connected: {self.port} @ {self.baudrate}"
        )

    def disconnect(self):
        self.wsm.stop()
        self.link.close()

    # =====================================================
    # SENSOR → ROS
    # =====================================================
    def serial_poll(self):
        was_connected = self.link.connected

        if not poll(self.link, self.wsm) and was_connected:
            self.get_logger().error(
                f"Serial link lost: {self.port}, not reconnecting"
            )

    # =====================================================
    # SPEEDOMETER EVENTS
    # =====================================================
    def on_speed_read(self, speed: float, interval: int):
        self._dbg_speed = (speed, interval)
        self.speed_pub.publish(Float64(data=speed))

    def on_distance_read(self, distance: float, ticks: int):
        self._dbg_distance = (distance, ticks)
        self.distance_pub.publish(Float64(data=distance))

    def on_battery_read(self, voltage: float, raw: int):
        self._dbg_battery = (voltage, raw)
        self.battery_pub.publish(Float64(data=voltage))

    def on_battery_critical(self):
        self.get_logger().warn("Sensor battery critical")
        self.battery_critical_pub.publish(Empty())

    def on_link_error(self, message: str):
        self._dbg_link_errors += 1
        self.get_logger().warn(f"RX error: {message}", throttle_duration_sec=5.0)

    def on_speed_timeout(self):
        self.get_logger().warn("Speed not received")
        self.speed_ok_pub.publish(Bool(data=False))

    def on_speed_restored(self):
        self.get_logger().info("Speed receive restored")
        self.speed_ok_pub.publish(Bool(data=True))

    def on_long_term_done(self, speed: float, diffusion: float):
        self.get_logger().info(
            f"Long-term measurement: speed={speed:.2f} diffusion={diffusion:.2f}"
        )
        self.long_term_pub.publish(Float64MultiArray(data=[speed, diffusion]))

    # =====================================================
    # SERVICES
    # =====================================================
    def reset_distance_callback(self, request, response):
        self.wsm.reset_distance_baseline()
        response.success = True
        response.message = "Distance reset"
        return response

    def start_long_term_callback(self, request, response):
        try:
            self.wsm.start_long_term_measurement(self.long_term_count)
        except (WsmError, ValueError) as e:
            response.success = False
            response.message = str(e)
            return response

        response.success = True
        response.message = f"Measuring {self.long_term_count} samples"
        return response

    # =====================================================
    # DEBUG
    # =====================================================
    def _print_debug_panel(self):
        speed, interval = self._dbg_speed
        distance, ticks = self._dbg_distance
        voltage, adc = self._dbg_battery
        parser = self.wsm.parser
        lt = self.wsm.long_term

        panel = f"""
╔══════════════════════════════════════════════════════╗
║         WSM SERIAL BRIDGE — DEBUG PANEL              ║
╠══════════════════════════════════════════════════════╣
║ RX bytes          : {parser.bytes_received:<33}║
║ RX valid frames   : {parser.valid_frames:<33}║
║ RX invalid frames : {parser.invalid_frames:<33}║
║ RX ignored frames : {self.wsm.ignored_frames:<33}║
║ RX stale flushes  : {parser.stale_flushes:<33}║
║ Link errors       : {self._dbg_link_errors:<33}║
║ Speed fresh       : {str(self.wsm.is_speed_fresh()):<33}║
║ Long-term         : {f'{lt.count}/{lt.target_count}' if lt.active else 'idle':<33}║
╠══════════════════════════════════════════════════════╣
║ Last speed        : {f'{speed:.2f} km/h (raw {interval})':<33}║
║ Last distance     : {f'{distance:.2f} m (raw {ticks})':<33}║
║ Last battery      : {f'{voltage:.3f} V (raw {adc})':<33}║
╚══════════════════════════════════════════════════════╝
"""
        self.get_logger().info(panel)

    # =====================================================
    # SHUTDOWN
    # =====================================================
    def destroy_node(self):
        self.disconnect()
        super().destroy_node()


def main(args=None):
    rclpy.init(args=args)
    node = SpeedometerNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()
