"""Piecework assignment tracking and payroll reporting for a garment-cutting shop."""
