"""Dispatch functions loaded by import path in the test suite."""

from dispatch import AlgorithmDecision


def send_first_car_to_top(state):
    return [AlgorithmDecision(elevator=0, add_targets=[state.floors - 1])]
