"""
Default QC thresholds for comparing a source buffer with its resynthesis.
"""
QC_THRESHOLDS = {
    "resynth": {
        "peak_dbfs_max": 0.0,  # Above full scale clips on write
        "correlation_min": 0.5,  # Minimum source/resynth correlation
        "error_ratio_max": 1.0,  # Max RMS error / source RMS
        "length_ratio_min": 0.9,  # Resynth should cover most of the source
    },
}
