from stripbooth.models.layout import FRAMES


def get_html_template() -> str:
    frame_buttons = "\n".join(
        f'<button class="frame-option" data-frame="{i}" onclick="chooseFrame({i})">'
        f'<img data-src="/api/booth/frames/{i}.png" alt="{frame.label}" /><span>{frame.label}</span></button>'
        for i, frame in enumerate(FRAMES)
    )
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0, user-scalable=no">
        <title>StripBooth</title>
        <style>
            * { margin: 0; padding: 0; box-sizing: border-box; }
            body { font-family: 'Segoe UI', Tahoma, sans-serif; background: #fef6e4; color: #403b37; text-align: center; }
            .screen { display: none; min-height: 100vh; padding: 2rem; flex-direction: column; align-items: center; gap: 1rem; }
            .screen--active { display: flex; }
            .btn { padding: 1rem 2rem; border: none; border-radius: 999px; background: #7bdff2; font-size: 1.2rem; font-weight: 600; cursor: pointer; }
            .btn:disabled { opacity: 0.4; cursor: default; }
            #preview { max-width: 80vw; max-height: 60vh; border-radius: 16px; background: #000; }
            .countdown { font-size: 6rem; font-weight: 700; }
            .grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 1rem; max-width: 900px; }
            .thumb img { width: 100%; border-radius: 8px; border: 4px solid transparent; }
            .thumb.selected img { border-color: #f582ae; }
            .frames { display: flex; gap: 1rem; flex-wrap: wrap; justify-content: center; }
            .frame-option { background: none; border: 4px solid transparent; border-radius: 8px; cursor: pointer; }
            .frame-option.selected { border-color: #f582ae; }
            .frame-option img { height: 240px; display: block; }
            #preview-strip { height: 60vh; }
            .qr img { width: 256px; }
        </style>
    </head>
    <body>
        <div id="screen-start" class="screen screen--active">
            <h1>StripBooth</h1>
            <p id="start-error"></p>
            <button class="btn" onclick="startSession()">Start</button>
        </div>

        <div id="screen-capture" class="screen">
            <img id="preview" src="" alt="Camera Preview" />
            <div class="countdown" id="countdown"></div>
            <div id="progress">0 / 6</div>
        </div>

        <div id="screen-select" class="screen">
            <h2>Pick your favourites</h2>
            <div id="selection-count">0 / 4 selected</div>
            <div class="grid" id="thumb-grid"></div>
            <div>
                <button class="btn" onclick="startSession()">Retake</button>
                <button class="btn" id="preview-btn" onclick="showPreview()" disabled>Next</button>
            </div>
        </div>

        <div id="screen-preview" class="screen">
            <img id="preview-strip" src="" alt="Strip preview" />
            <div class="frames" id="frame-grid">
                """ + frame_buttons + """
            </div>
            <div>
                <button class="btn" onclick="showScreen('select')">Back</button>
                <button class="btn" onclick="exportStrip()">Print &amp; Share</button>
            </div>
        </div>

        <div id="screen-done" class="screen">
            <h2>All done!</h2>
            <div class="qr"><img id="qr-image" alt="" /><p><a id="download-link" href="#">Download strip</a></p></div>
            <div class="qr"><img id="qr-video-image" alt="" style="display:none" /><p id="qr-video-loading">Making your video...</p></div>
            <button class="btn" onclick="resetBooth()">Restart</button>
        </div>

        <script>
            const screens = ["start", "capture", "select", "preview", "done"];
            const phaseScreens = { idle: "start", acquiring: "capture", shooting: "capture", selecting: "select", exporting: "done", done: "done" };
            let status = { selected_photos: [], frame_index: 0 };

            function showScreen(key) {
                screens.forEach((name) => document.getElementById(`screen-${name}`).classList.toggle("screen--active", name === key));
            }

            async function api(path) {
                const response = await fetch(`/api/booth${path}`, { method: "POST" });
                status = await response.json();
                return status;
            }

            async function startSession() { await api("/start"); }
            async function resetBooth() { await api("/reset"); showScreen("start"); }
            async function exportStrip() { await api("/export"); }

            async function toggle(index) {
                await api(`/select/${index}`);
                renderSelection();
            }

            async function chooseFrame(index) {
                await api(`/frame/${index}`);
                refreshPreview();
            }

            function refreshPreview() {
                document.getElementById("preview-strip").src = `/api/booth/preview.png?t=${Date.now()}`;
                document.querySelectorAll(".frame-option").forEach((el) => {
                    el.classList.toggle("selected", Number(el.dataset.frame) === status.frame_index);
                });
            }

            function showPreview() {
                document.querySelectorAll(".frame-option img").forEach((img) => { img.src = `${img.dataset.src}?t=${Date.now()}`; });
                refreshPreview();
                showScreen("preview");
            }

            function buildSelectionGrid(count) {
                const grid = document.getElementById("thumb-grid");
                grid.innerHTML = "";
                for (let i = 0; i < count; i += 1) {
                    const thumb = document.createElement("div");
                    thumb.className = "thumb";
                    thumb.dataset.index = i;
                    thumb.innerHTML = `<img src="/api/booth/stills/${i}.jpg?t=${Date.now()}" />`;
                    thumb.onclick = () => toggle(i);
                    grid.appendChild(thumb);
                }
                renderSelection();
            }

            function renderSelection() {
                document.querySelectorAll(".thumb").forEach((el) => {
                    el.classList.toggle("selected", status.selected_photos.includes(Number(el.dataset.index)));
                });
                document.getElementById("selection-count").textContent = `${status.selection_count} / ${status.selection_limit} selected`;
                document.getElementById("preview-btn").disabled = !status.can_preview;
            }

            function renderExport(message) {
                if (message.qr_data_url) {
                    document.getElementById("qr-image").src = message.qr_data_url;
                    document.getElementById("download-link").href = message.download_url;
                } else if (message.qr_status === "failed") {
                    document.getElementById("qr-image").alt = "QR generation failed";
                }
                const loading = document.getElementById("qr-video-loading");
                const videoQr = document.getElementById("qr-video-image");
                if (message.video_status === "ready") {
                    videoQr.src = message.video_qr_data_url;
                    videoQr.style.display = "";
                    loading.style.display = "none";
                } else if (message.video_status === "unavailable") {
                    loading.textContent = "Video unavailable";
                } else {
                    videoQr.style.display = "none";
                    loading.style.display = "";
                    loading.textContent = "Making your video...";
                }
            }

            async function onPhase(phase) {
                if (phase === "selecting") {
                    const response = await fetch("/api/booth/status");
                    status = await response.json();
                    buildSelectionGrid(status.photo_count);
                }
                if (phaseScreens[phase]) showScreen(phaseScreens[phase]);
            }

            const ws = new WebSocket(`${location.protocol === "https:" ? "wss" : "ws"}://${location.host}/ws`);
            ws.onmessage = (event) => {
                const message = JSON.parse(event.data);
                if (message.type === "preview") {
                    document.getElementById("preview").src = `data:image/jpeg;base64,${message.data}`;
                } else if (message.type === "countdown") {
                    document.getElementById("countdown").textContent = message.value;
                } else if (message.type === "progress") {
                    document.getElementById("progress").textContent = message.text;
                    document.getElementById("countdown").textContent = "";
                } else if (message.type === "phase") {
                    onPhase(message.phase);
                } else if (message.type === "error") {
                    document.getElementById("start-error").textContent = message.message;
                    alert(message.message);
                } else if (message.type === "export") {
                    renderExport(message);
                } else if (message.type === "status") {
                    status = message;
                    onPhase(message.phase);
                }
            };
        </script>
    </body>
    </html>
    """
