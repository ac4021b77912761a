"""
Recognition package:
- catalog: ingredient catalog providers (JSON file / HTTP)
- localizer / text_reader / barcode_lookup: external recognition backends
- adapters: one detector adapter per input modality
- normalizer / matcher / assembler: label -> catalog -> candidate resolution
- pipeline: RecognitionPipeline facade and its startup builder
"""
