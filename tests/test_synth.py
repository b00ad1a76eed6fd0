import numpy as np

from heartlight.synth import AudioSynthesizer

from .conftest import magnitudes_for


def test_silence_synthesizes_silence(cfg):
    pcm = AudioSynthesizer(cfg).synthesize(dict.fromkeys(cfg.target_frequencies, 0.0))
    assert pcm.dtype == np.int16
    assert pcm.shape == (cfg.fft_size,)
    assert not pcm.any()


def test_carrier_becomes_audible_tone(cfg):
    synth = AudioSynthesizer(cfg)
    pcm = synth.synthesize(magnitudes_for(19000, level=100.0, floor=1.0))
    spectrum = np.abs(np.fft.rfft(pcm.astype(np.float64)))
    # 1318.51 Hz lands on bin 30 at 44.1 kHz / 1024
    assert int(np.argmax(spectrum)) == int(1318.510 * cfg.fft_size / cfg.sample_rate)


def test_noise_threshold_tracks_other_carriers(cfg):
    synth = AudioSynthesizer(cfg)
    assert synth.noise_threshold == 0.0
    for _ in range(200):
        synth.synthesize(magnitudes_for(18500, level=1000.0, floor=40.0))
    assert synth.noise_threshold == 40.0
    # Carriers at the noise level are suppressed
    pcm = synth.synthesize(dict.fromkeys(cfg.target_frequencies, 40.0))
    assert not pcm.any()


def test_submit_is_ignored_when_not_playing(cfg):
    synth = AudioSynthesizer(cfg)
    synth.submit(magnitudes_for(18500))
    assert synth.q.empty()
    assert not synth.playing
    synth.stop()
