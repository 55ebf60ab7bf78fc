#!/usr/bin/env python3
from audio_visualizer.main import create_app


app = create_app()
app.synth()
