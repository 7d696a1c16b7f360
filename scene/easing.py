"""
Easing functions for frame-driven animations.

Every function returns the change to apply at frame `f` of a `t`-frame
animation whose total change is `d`; summing the values of frames 1..t
approximates `d`.
"""
from __future__ import annotations

import math


def quad_in(d: float, f: float, t: float) -> float:
    f /= t
    return 2 * f * d / t


def quad_out(d: float, f: float, t: float) -> float:
    f /= t
    return -2 * (f - 1) * d / t


def quad_in_out(d: float, f: float, t: float) -> float:
    f /= t / 2
    if f < 1:
        return 2 * f * d / t
    f -= 1
    return -2 * (f - 1) * d / t


def exp_in(d: float, f: float, t: float, p: float = 3) -> float:
    f /= t
    return p * f ** (p - 1) * d / t


def exp_out(d: float, f: float, t: float, p: float = 3) -> float:
    return exp_in(d, t - f, t, p)


def exp_in_out(d: float, f: float, t: float, p: float = 3) -> float:
    f /= t / 2
    if f < 1:
        return exp_in(d, f * t, t, p)
    f -= 1
    return exp_out(d, f * t, t, p)


def back_in(d: float, f: float, t: float, a: float = 1.70158) -> float:
    f /= t
    return f * (3 * a * f + 3 * f - 2 * a) * d / t


def back_out(d: float, f: float, t: float, a: float = 1.70158) -> float:
    f /= t
    f -= 1
    return f * (3 * a * f + 3 * f + 2 * a) * d / t


def back_in_out(d: float, f: float, t: float, a: float = 1.70158 * 1.525) -> float:
    f /= t / 2
    if f < 1:
        return f * (3 * a * f + 3 * f - 2 * a) * d / t
    f -= 2
    return f * (3 * a * f + 3 * f + 2 * a) * d / t


def bounce_out(d: float, f: float, t: float) -> float:
    f /= t
    if f < 1 / 2.75:
        return 7.5625 * 2 * f * d / t
    if f < 2 / 2.75:
        return 7.5625 * 2 * (f - 1.5 / 2.75) * d / t
    if f < 2.5 / 2.75:
        return 7.5625 * 2 * (f - 2.25 / 2.75) * d / t
    return 7.5625 * 2 * (f - 2.625 / 2.75) * d / t


def bounce_in(d: float, f: float, t: float) -> float:
    return bounce_out(d, t - f, t)


def bounce_in_out(d: float, f: float, t: float) -> float:
    if f < t / 2:
        return bounce_in(d, f * 2, t)
    return bounce_out(d, f * 2 - t, t)


def elastic_in(d: float, f: float, t: float, p: float = 3) -> float:
    f /= t
    period = 1 / (p + 0.25)
    w = 2 * math.pi / period
    return d / t * (2 / 9) * f ** 3.5 * math.sin(f * w) + d / t * f ** 4.5 * math.cos(f * w) * w


def elastic_out(d: float, f: float, t: float, p: float = 3) -> float:
    return elastic_in(d, t - f, t, p)


def elastic_in_out(d: float, f: float, t: float, p: float = 3) -> float:
    if f < t / 2:
        return elastic_in(d, f * 2, t, p)
    return elastic_out(d, f * 2 - t, t, p)
